import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from iso20022_generator.models import (
    Agent,
    CashAccount,
    ContactDetails,
    CreditTransferTransaction,
    CustomerCreditTransferInitiation,
    Document,
    FinancialInstitution,
    GroupHeader,
    InitiatingParty,
    InstructedAmount,
    Initialization,
    Party,
    PaymentIdentification,
    PaymentInstruction,
    PaymentTypeInformation,
    PostalAddress,
    Receiver,
    Transaction,
)
from iso20022_generator.writer import XMLWriter

logger = logging.getLogger(__name__)

GENERATOR_NAME = "iso20022-Generator"
GENERATOR_VERSION = "1.3.0"
PAYMENT_INFORMATION_ID = "PmtInfId-1"
PAYMENT_METHOD_TRANSFER = "TRA"


def _is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


class Pain001Builder:
    """
    Builds a single pain.001 customer credit transfer initiation message.

    The group header and the one payment information block are created up
    front; transactions are appended one at a time with ``add_transaction``
    and the header's transaction count is kept in step with them.

    Instances are not thread-safe. Serialize access externally if several
    threads need to add transactions to the same message.
    """

    def __init__(self, init: Initialization, writer: Optional[XMLWriter] = None):
        """
        Sets up the message skeleton from the sender information.

        Args:
            init: Sender identity, account and execution date. Values are
                  taken as-is; use ``Validator.validate_initialization`` for
                  a stricter check beforehand.
            writer: Serializer used by the output accessors. Defaults to a
                    pain.001.001.03.ch.02 ``XMLWriter``.
        """
        self._writer = writer or XMLWriter()

        # Level A
        group_header = GroupHeader(
            message_id=init.unique_document_id,
            creation_date_time=datetime.now().astimezone(),
            number_of_transactions="0",
            control_sum=Decimal("0"),
            initiating_party=InitiatingParty(
                name=init.sender_party_name,
                contact_details=ContactDetails(name=GENERATOR_NAME, other=GENERATOR_VERSION),
            ),
        )

        # Level B
        debtor_institution = FinancialInstitution()
        # BIC is only set when given so older receivers keep getting the same output
        if not _is_blank(init.sender_bic):
            debtor_institution.bic = init.sender_bic

        self._payment = PaymentInstruction(
            payment_information_id=PAYMENT_INFORMATION_ID,
            payment_method=PAYMENT_METHOD_TRANSFER,
            batch_booking=True,
            requested_execution_date=init.execution_date,
            debtor=Party(name=init.sender_party_name),
            debtor_account=CashAccount(iban=init.sender_iban),
            debtor_agent=Agent(financial_institution=debtor_institution),
        )
        self._group_header = group_header

        self._document = Document(
            customer_credit_transfer_initiation=CustomerCreditTransferInitiation(
                group_header=group_header,
                payment_information=[self._payment],
            )
        )
        logger.debug("Initialized pain.001 message %s", init.unique_document_id)

    def add_transaction(self, receiver: Receiver, transaction: Transaction) -> None:
        """
        Appends a credit transfer to the payment information block.

        The instruction id is ``"1-<n>"`` where n is the number of transactions
        already present. Receiver and transaction values are copied without
        any interpretation, blank values included.
        """
        transactions = self._payment.credit_transfer_transactions

        street = receiver.street_name
        if not _is_blank(receiver.street_number):
            street = f"{receiver.street_name} {receiver.street_number}"

        credit_transfer = CreditTransferTransaction(
            payment_id=PaymentIdentification(
                instruction_id=f"1-{len(transactions)}",
                end_to_end_id=transaction.reference_identification,
            ),
            payment_type_information=PaymentTypeInformation(),
            amount=InstructedAmount(currency=transaction.currency_code, value=transaction.amount),
            creditor_agent=Agent(financial_institution=FinancialInstitution()),
            creditor=Party(
                name=receiver.name,
                postal_address=PostalAddress(
                    street_name=street,
                    post_code=receiver.zip,
                    town_name=receiver.city,
                    country=receiver.country_code,
                ),
            ),
            creditor_account=CashAccount(iban=transaction.receiver_iban),
        )

        transactions.append(credit_transfer)
        self._update_group_header()
        logger.debug(
            "Added transaction %s (%s)",
            credit_transfer.payment_id.instruction_id,
            transaction.reference_identification,
        )

    def _update_group_header(self) -> None:
        self._group_header.number_of_transactions = str(
            len(self._payment.credit_transfer_transactions)
        )

    def save(self, path: str) -> None:
        """
        Serializes the message to the given file path, replacing any existing file.
        I/O errors are raised to the caller unchanged.
        """
        xml_bytes = self._writer.to_xml(self._document)
        with open(path, "wb") as f:
            f.write(xml_bytes)
        logger.info(
            "Wrote pain.001 message %s with %s transaction(s) to %s",
            self._group_header.message_id,
            self._group_header.number_of_transactions,
            path,
        )

    def to_bytes(self) -> bytes:
        """Returns the UTF-8 encoded XML document."""
        return self._writer.to_xml(self._document)

    def to_string(self) -> str:
        """Returns the XML document as text."""
        return self.to_bytes().decode("utf-8")

    @property
    def document(self) -> Document:
        """
        Direct access to the live document tree.

        This is not meant for normal use, but some financial institutions
        require fields the builder does not model. Changes made here bypass
        the builder, e.g. the transaction count is only recomputed on the
        next ``add_transaction``.
        """
        return self._document
