from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from lxml import etree

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
    Party,
    PaymentIdentification,
    PaymentInstruction,
    PaymentTypeInformation,
    PostalAddress,
)


class Pain001Parser:
    """
    Reads a serialized pain.001 credit transfer initiation back into a ``Document`` tree.

    Works on any pain.001.001.03 flavour (ISO or Swiss) since lookups go
    through the document's own default namespace. An element that is present
    but empty is read back as an empty string, a missing element as ``None``.
    """

    def __init__(self, message_data: bytes):
        self.message_data = message_data.strip()
        try:
            self.tree = etree.fromstring(self.message_data)
        except etree.XMLSyntaxError as e:
            raise ValueError(f"Payload is not well-formed XML: {e}") from e

        self.default_ns = self.tree.nsmap.get(None)
        self.ns = {"ns": self.default_ns} if self.default_ns else {}

        self.root = self._first(self.tree, "ns:CstmrCdtTrfInitn")
        if self.root is None:
            raise ValueError("Payload is not a pain.001 document (CstmrCdtTrfInitn missing).")

    def _xpath(self, element: Any, xpath_expr: str) -> list:
        if not self.default_ns:
            return element.xpath(xpath_expr.replace("ns:", ""))
        return element.xpath(xpath_expr, namespaces=self.ns)

    def _first(self, element: Any, xpath_expr: str) -> Optional[Any]:
        if element is None:
            return None
        result = self._xpath(element, xpath_expr)
        return result[0] if result else None

    def _get_text_from(self, element: Any, xpath_expr: str) -> Optional[str]:
        node = self._first(element, xpath_expr)
        if node is None:
            return None
        return node.text or ""

    def _get_decimal_from(self, element: Any, xpath_expr: str) -> Optional[Decimal]:
        text = self._get_text_from(element, xpath_expr)
        if not text:
            return None
        try:
            return Decimal(text.strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal value in {xpath_expr}: '{text}'") from e

    def parse(self) -> Document:
        """
        Parses the whole message.

        Returns:
            Document: A freshly built tree equal in content to the one that was serialized.

        Raises:
            ValueError: If a date, timestamp or amount cannot be read.
        """
        initiation = CustomerCreditTransferInitiation(
            group_header=self._parse_group_header(self._first(self.root, "ns:GrpHdr"))
        )
        for pmt_inf in self._xpath(self.root, "ns:PmtInf"):
            initiation.payment_information.append(self._parse_payment_information(pmt_inf))
        return Document(customer_credit_transfer_initiation=initiation)

    def _parse_group_header(self, grp_hdr: Any) -> GroupHeader:
        header = GroupHeader(
            message_id=self._get_text_from(grp_hdr, "ns:MsgId"),
            number_of_transactions=self._get_text_from(grp_hdr, "ns:NbOfTxs"),
            control_sum=self._get_decimal_from(grp_hdr, "ns:CtrlSum"),
        )

        created = self._get_text_from(grp_hdr, "ns:CreDtTm")
        if created:
            header.creation_date_time = datetime.fromisoformat(created.strip())

        initg_pty = self._first(grp_hdr, "ns:InitgPty")
        if initg_pty is not None:
            header.initiating_party = InitiatingParty(name=self._get_text_from(initg_pty, "ns:Nm"))
            ctct_dtls = self._first(initg_pty, "ns:CtctDtls")
            if ctct_dtls is not None:
                header.initiating_party.contact_details = ContactDetails(
                    name=self._get_text_from(ctct_dtls, "ns:Nm"),
                    other=self._get_text_from(ctct_dtls, "ns:Othr"),
                )
        return header

    def _parse_payment_information(self, pmt_inf: Any) -> PaymentInstruction:
        payment = PaymentInstruction(
            payment_information_id=self._get_text_from(pmt_inf, "ns:PmtInfId"),
            payment_method=self._get_text_from(pmt_inf, "ns:PmtMtd"),
            debtor=self._parse_party(self._first(pmt_inf, "ns:Dbtr")),
            debtor_account=self._parse_account(self._first(pmt_inf, "ns:DbtrAcct")),
            debtor_agent=self._parse_agent(self._first(pmt_inf, "ns:DbtrAgt")),
        )

        batch_booking = self._get_text_from(pmt_inf, "ns:BtchBookg")
        if batch_booking is not None:
            payment.batch_booking = batch_booking.strip() in ("true", "1")

        execution_date = self._get_text_from(pmt_inf, "ns:ReqdExctnDt")
        if execution_date:
            payment.requested_execution_date = date.fromisoformat(execution_date.strip())

        for tx_inf in self._xpath(pmt_inf, "ns:CdtTrfTxInf"):
            payment.credit_transfer_transactions.append(self._parse_transaction(tx_inf))
        return payment

    def _parse_transaction(self, tx_inf: Any) -> CreditTransferTransaction:
        transaction = CreditTransferTransaction(
            payment_id=PaymentIdentification(
                instruction_id=self._get_text_from(tx_inf, "ns:PmtId/ns:InstrId"),
                end_to_end_id=self._get_text_from(tx_inf, "ns:PmtId/ns:EndToEndId"),
            ),
            amount=InstructedAmount(value=self._get_decimal_from(tx_inf, "ns:Amt/ns:InstdAmt")),
            creditor_agent=self._parse_agent(self._first(tx_inf, "ns:CdtrAgt")),
            creditor=self._parse_party(self._first(tx_inf, "ns:Cdtr")),
            creditor_account=self._parse_account(self._first(tx_inf, "ns:CdtrAcct")),
        )

        instd_amt = self._first(tx_inf, "ns:Amt/ns:InstdAmt")
        if instd_amt is not None:
            transaction.amount.currency = instd_amt.get("Ccy")

        if self._first(tx_inf, "ns:PmtTpInf") is None:
            transaction.payment_type_information = None
        else:
            transaction.payment_type_information = PaymentTypeInformation()
        return transaction

    def _parse_party(self, node: Any) -> Optional[Party]:
        if node is None:
            return None
        party = Party(name=self._get_text_from(node, "ns:Nm"))
        pstl_adr = self._first(node, "ns:PstlAdr")
        if pstl_adr is not None:
            party.postal_address = PostalAddress(
                street_name=self._get_text_from(pstl_adr, "ns:StrtNm"),
                building_number=self._get_text_from(pstl_adr, "ns:BldgNb"),
                post_code=self._get_text_from(pstl_adr, "ns:PstCd"),
                town_name=self._get_text_from(pstl_adr, "ns:TwnNm"),
                country=self._get_text_from(pstl_adr, "ns:Ctry"),
            )
        return party

    def _parse_account(self, node: Any) -> Optional[CashAccount]:
        if node is None:
            return None
        return CashAccount(iban=self._get_text_from(node, "ns:Id/ns:IBAN"))

    def _parse_agent(self, node: Any) -> Optional[Agent]:
        if node is None:
            return None
        return Agent(
            financial_institution=FinancialInstitution(
                bic=self._get_text_from(node, "ns:FinInstnId/ns:BIC")
            )
        )
