from datetime import date, datetime
from decimal import Decimal

import pytest

from iso20022_generator.builder import (
    GENERATOR_NAME,
    GENERATOR_VERSION,
    PAYMENT_INFORMATION_ID,
    Pain001Builder,
)
from iso20022_generator.models import Initialization, Receiver, Transaction


@pytest.fixture
def init():
    return Initialization(
        unique_document_id="MSG1",
        sender_party_name="ACME GmbH",
        sender_iban="CH9300762011623852957",
        execution_date=date(2024, 1, 1),
        sender_bic="",
    )


def make_receiver(**overrides):
    data = dict(
        name="Jane Doe",
        street_name="Main St",
        street_number="12",
        zip="8000",
        city="Zurich",
        country_code="CH",
    )
    data.update(overrides)
    return Receiver(**data)


def make_transaction(**overrides):
    data = dict(
        reference_identification="INV-1",
        currency_code="CHF",
        amount=Decimal("100.00"),
        receiver_iban="GB90MIDL40051522334455",
    )
    data.update(overrides)
    return Transaction(**data)


def test_initialization_skeleton(init):
    before = datetime.now().astimezone()
    builder = Pain001Builder(init)
    after = datetime.now().astimezone()

    initiation = builder.document.customer_credit_transfer_initiation
    header = initiation.group_header
    assert header.message_id == "MSG1"
    assert before <= header.creation_date_time <= after
    assert header.number_of_transactions == "0"
    assert header.control_sum == Decimal("0")
    assert header.initiating_party.name == "ACME GmbH"
    assert header.initiating_party.contact_details.name == GENERATOR_NAME
    assert header.initiating_party.contact_details.other == GENERATOR_VERSION

    assert len(initiation.payment_information) == 1
    payment = initiation.payment_information[0]
    assert payment.payment_information_id == PAYMENT_INFORMATION_ID == "PmtInfId-1"
    assert payment.payment_method == "TRA"
    assert payment.batch_booking is True
    assert payment.requested_execution_date == date(2024, 1, 1)
    assert payment.debtor.name == "ACME GmbH"
    assert payment.debtor_account.iban == "CH9300762011623852957"
    assert payment.credit_transfer_transactions == []


@pytest.mark.parametrize("bic", [None, "", "   "])
def test_blank_sender_bic_is_not_set(init, bic):
    init.sender_bic = bic
    builder = Pain001Builder(init)
    agent = builder.document.customer_credit_transfer_initiation.payment_information[0].debtor_agent
    assert agent.financial_institution is not None
    assert agent.financial_institution.bic is None


def test_sender_bic_is_copied_unaltered(init):
    init.sender_bic = "UBSWCHZH80A"
    builder = Pain001Builder(init)
    agent = builder.document.customer_credit_transfer_initiation.payment_information[0].debtor_agent
    assert agent.financial_institution.bic == "UBSWCHZH80A"


def test_add_transaction_fields(init):
    builder = Pain001Builder(init)
    result = builder.add_transaction(make_receiver(), make_transaction())
    assert result is None

    tx = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions[0]
    assert tx.payment_id.instruction_id == "1-0"
    assert tx.payment_id.end_to_end_id == "INV-1"
    assert tx.payment_type_information is not None
    assert tx.amount.currency == "CHF"
    assert tx.amount.value == Decimal("100.00")
    assert tx.creditor_agent.financial_institution.bic is None
    assert tx.creditor.name == "Jane Doe"
    assert tx.creditor.postal_address.street_name == "Main St 12"
    assert tx.creditor.postal_address.building_number is None
    assert tx.creditor.postal_address.post_code == "8000"
    assert tx.creditor.postal_address.town_name == "Zurich"
    assert tx.creditor.postal_address.country == "CH"
    assert tx.creditor_account.iban == "GB90MIDL40051522334455"


def test_count_and_order_follow_every_call(init):
    builder = Pain001Builder(init)
    header = builder.document.customer_credit_transfer_initiation.group_header
    transactions = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions

    for k in range(1, 6):
        builder.add_transaction(make_receiver(), make_transaction(reference_identification=f"REF-{k}"))
        assert header.number_of_transactions == str(k)
        assert len(transactions) == k

    assert [tx.payment_id.end_to_end_id for tx in transactions] == [f"REF-{k}" for k in range(1, 6)]
    assert [tx.payment_id.instruction_id for tx in transactions] == [f"1-{j}" for j in range(5)]


def test_instruction_id_ignores_reference(init):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(), make_transaction(reference_identification="1-7"))
    builder.add_transaction(make_receiver(), make_transaction(reference_identification="1-7"))
    transactions = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions
    assert [tx.payment_id.instruction_id for tx in transactions] == ["1-0", "1-1"]


@pytest.mark.parametrize("number", [None, "", "  \t"])
def test_blank_street_number_leaves_street_unchanged(init, number):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(street_number=number), make_transaction())
    tx = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions[0]
    assert tx.creditor.postal_address.street_name == "Main St"


def test_street_number_joined_with_single_space(init):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(street_name="Bahnhofstrasse", street_number="1a"), make_transaction())
    tx = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions[0]
    assert tx.creditor.postal_address.street_name == "Bahnhofstrasse 1a"


def test_unvalidated_input_passes_through(init):
    # Blank names, lowercase currency and negative amounts are not rejected
    builder = Pain001Builder(init)
    builder.add_transaction(
        make_receiver(name="", zip=None, country_code="switzerland"),
        make_transaction(currency_code="chf", amount=Decimal("-5.000")),
    )
    tx = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions[0]
    assert tx.creditor.name == ""
    assert tx.creditor.postal_address.post_code is None
    assert tx.creditor.postal_address.country == "switzerland"
    assert tx.amount.currency == "chf"
    assert tx.amount.value == Decimal("-5.000")


def test_control_sum_is_not_aggregated(init):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(), make_transaction(amount=Decimal("10.00")))
    builder.add_transaction(make_receiver(), make_transaction(amount=Decimal("20.00")))
    assert builder.document.customer_credit_transfer_initiation.group_header.control_sum == Decimal("0")


def test_builders_are_independent(init):
    first = Pain001Builder(init)
    second = Pain001Builder(init)
    first.add_transaction(make_receiver(), make_transaction())

    assert first.document is not second.document
    assert second.document.customer_credit_transfer_initiation.group_header.number_of_transactions == "0"


def test_document_accessor_returns_live_tree(init):
    builder = Pain001Builder(init)
    builder.document.customer_credit_transfer_initiation.payment_information[0].debtor.name = "Hand Tuned AG"
    assert builder.document is builder.document
    assert b"<Nm>Hand Tuned AG</Nm>" in builder.to_bytes()


def test_output_accessors_do_not_mutate(init, tmp_path):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(), make_transaction())

    first = builder.to_string()
    path = tmp_path / "pain001.xml"
    builder.save(str(path))
    second = builder.to_string()

    assert first == second
    assert path.read_bytes().decode("utf-8") == first
    assert builder.document.customer_credit_transfer_initiation.group_header.number_of_transactions == "1"


def test_save_propagates_io_errors(init, tmp_path):
    builder = Pain001Builder(init)
    with pytest.raises(OSError):
        builder.save(str(tmp_path / "missing-dir" / "out.xml"))


class ExplodingReceiver(Receiver):
    @property
    def street_number(self):
        raise RuntimeError("street number unavailable")

    @street_number.setter
    def street_number(self, value):
        pass


def test_failed_add_transaction_leaves_document_untouched(init):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(), make_transaction())
    header = builder.document.customer_credit_transfer_initiation.group_header
    transactions = builder.document.customer_credit_transfer_initiation.payment_information[0].credit_transfer_transactions

    with pytest.raises(RuntimeError):
        builder.add_transaction(
            ExplodingReceiver(name="Jane Doe", street_name="Main St", zip="8000", city="Zurich", country_code="CH"),
            make_transaction(),
        )

    assert len(transactions) == 1
    assert header.number_of_transactions == "1"

    builder.add_transaction(make_receiver(), make_transaction())
    assert transactions[1].payment_id.instruction_id == "1-1"


def test_document_to_dict(init):
    builder = Pain001Builder(init)
    builder.add_transaction(make_receiver(), make_transaction())

    data = builder.document.to_dict()
    initiation = data["customer_credit_transfer_initiation"]
    assert initiation["group_header"]["number_of_transactions"] == "1"
    assert initiation["group_header"]["initiating_party"]["contact_details"]["name"] == GENERATOR_NAME

    payment = initiation["payment_information"][0]
    assert payment["debtor_agent"] == {"financial_institution": {"bic": None}}
    tx = payment["credit_transfer_transactions"][0]
    assert tx["payment_id"] == {"instruction_id": "1-0", "end_to_end_id": "INV-1"}
    assert tx["payment_type_information"] == {}
    assert tx["amount"] == {"currency": "CHF", "value": Decimal("100.00")}
    assert tx["creditor"]["postal_address"]["street_name"] == "Main St 12"
