from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from lxml import etree

from iso20022_generator.models import (
    Agent,
    CashAccount,
    CreditTransferTransaction,
    Document,
    GroupHeader,
    Party,
    PaymentInstruction,
    PostalAddress,
)

PAIN001_CH_NAMESPACE = "http://www.six-interbank-clearing.com/de/pain.001.001.03.ch.02.xsd"


class XMLWriter:
    """
    Compiles a pain.001 ``Document`` tree into ISO 20022 XML (lxml byte streams).

    Elements are written in schema order. Fields that are ``None`` are left
    out entirely, blocks that exist but carry no values are written as empty
    elements.
    """

    def __init__(self, namespace: str = PAIN001_CH_NAMESPACE):
        """
        Args:
            namespace: The default XML namespace of the emitted Document.
        """
        self.namespace = namespace
        self.nsmap = {None: self.namespace}

    def to_xml(self, document: Document) -> bytes:
        """
        Maps the document tree onto an lxml tree and returns the encoded byte string.
        """
        root = etree.Element("Document", nsmap=self.nsmap)
        initiation = document.customer_credit_transfer_initiation
        cstmr_cdt = etree.SubElement(root, "CstmrCdtTrfInitn")

        self._build_group_header(cstmr_cdt, initiation.group_header)
        for payment in initiation.payment_information:
            self._build_payment_information(cstmr_cdt, payment)

        return etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8")

    def _text(self, parent: etree.Element, tag: str, value: Any) -> Optional[etree.Element]:
        """Adds ``<tag>value</tag>`` unless the value is unset."""
        if value is None:
            return None
        node = etree.SubElement(parent, tag)
        node.text = self._format(value)
        return node

    @staticmethod
    def _format(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, Decimal):
            return format(value, "f")
        if isinstance(value, datetime):
            return value.isoformat(timespec="seconds")
        if isinstance(value, date):
            return value.isoformat()
        return str(value)

    def _build_group_header(self, parent: etree.Element, header: GroupHeader):
        """Builds the GrpHdr node."""
        grp_hdr = etree.SubElement(parent, "GrpHdr")
        self._text(grp_hdr, "MsgId", header.message_id)
        self._text(grp_hdr, "CreDtTm", header.creation_date_time)
        self._text(grp_hdr, "NbOfTxs", header.number_of_transactions)
        self._text(grp_hdr, "CtrlSum", header.control_sum)

        party = header.initiating_party
        if party is not None:
            initg_pty = etree.SubElement(grp_hdr, "InitgPty")
            self._text(initg_pty, "Nm", party.name)
            if party.contact_details is not None:
                ctct_dtls = etree.SubElement(initg_pty, "CtctDtls")
                self._text(ctct_dtls, "Nm", party.contact_details.name)
                self._text(ctct_dtls, "Othr", party.contact_details.other)

    def _build_payment_information(self, parent: etree.Element, payment: PaymentInstruction):
        """Builds a PmtInf node including all of its CdtTrfTxInf children."""
        pmt_inf = etree.SubElement(parent, "PmtInf")
        self._text(pmt_inf, "PmtInfId", payment.payment_information_id)
        self._text(pmt_inf, "PmtMtd", payment.payment_method)
        self._text(pmt_inf, "BtchBookg", payment.batch_booking)
        self._text(pmt_inf, "ReqdExctnDt", payment.requested_execution_date)

        self._build_party(pmt_inf, "Dbtr", payment.debtor)
        self._build_account(pmt_inf, "DbtrAcct", payment.debtor_account)
        self._build_agent(pmt_inf, "DbtrAgt", payment.debtor_agent)

        for transaction in payment.credit_transfer_transactions:
            self._build_transaction(pmt_inf, transaction)

    def _build_transaction(self, parent: etree.Element, transaction: CreditTransferTransaction):
        tx_inf = etree.SubElement(parent, "CdtTrfTxInf")

        pmt_id = etree.SubElement(tx_inf, "PmtId")
        self._text(pmt_id, "InstrId", transaction.payment_id.instruction_id)
        self._text(pmt_id, "EndToEndId", transaction.payment_id.end_to_end_id)

        if transaction.payment_type_information is not None:
            etree.SubElement(tx_inf, "PmtTpInf")

        amt = etree.SubElement(tx_inf, "Amt")
        if transaction.amount.value is not None or transaction.amount.currency is not None:
            instd_amt = etree.SubElement(amt, "InstdAmt")
            if transaction.amount.value is not None:
                instd_amt.text = self._format(transaction.amount.value)
            if transaction.amount.currency is not None:
                instd_amt.set("Ccy", transaction.amount.currency)

        self._build_agent(tx_inf, "CdtrAgt", transaction.creditor_agent)
        self._build_party(tx_inf, "Cdtr", transaction.creditor)
        self._build_account(tx_inf, "CdtrAcct", transaction.creditor_account)

    def _build_party(self, parent: etree.Element, tag: str, party: Optional[Party]):
        if party is None:
            return
        node = etree.SubElement(parent, tag)
        self._text(node, "Nm", party.name)
        if party.postal_address is not None:
            self._build_postal_address(node, party.postal_address)

    def _build_account(self, parent: etree.Element, tag: str, account: Optional[CashAccount]):
        if account is None:
            return
        node = etree.SubElement(parent, tag)
        id_node = etree.SubElement(node, "Id")
        self._text(id_node, "IBAN", account.iban)

    def _build_agent(self, parent: etree.Element, tag: str, agent: Optional[Agent]):
        if agent is None:
            return
        node = etree.SubElement(parent, tag)
        fin_instn_id = etree.SubElement(node, "FinInstnId")
        if agent.financial_institution is not None:
            self._text(fin_instn_id, "BIC", agent.financial_institution.bic)

    def _build_postal_address(self, parent: etree.Element, address: PostalAddress):
        """Builds a PstlAdr node."""
        pstl_adr = etree.SubElement(parent, "PstlAdr")
        self._text(pstl_adr, "StrtNm", address.street_name)
        self._text(pstl_adr, "BldgNb", address.building_number)
        self._text(pstl_adr, "PstCd", address.post_code)
        self._text(pstl_adr, "TwnNm", address.town_name)
        self._text(pstl_adr, "Ctry", address.country)
