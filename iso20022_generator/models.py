from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class Initialization:
    """
    One-time input describing the sender of a pain.001 message.

    Attributes:
        unique_document_id (str):
            The message identification (GrpHdr/MsgId). Banks use it for duplicate
            detection, so the caller has to keep it unique per message.
        sender_party_name (str):
            Name of the initiating party, also used as debtor name.
        sender_iban (str):
            IBAN of the account to be debited.
        execution_date (date):
            Requested execution date of the whole payment block.
        sender_bic (Optional[str]):
            BIC of the debtor agent. Only emitted when non-blank.
    """

    unique_document_id: str
    sender_party_name: str
    sender_iban: str
    execution_date: date
    sender_bic: Optional[str] = None


@dataclass
class Receiver:
    """
    The beneficiary of a single credit transfer.
    """

    name: str
    street_name: str
    zip: str
    city: str
    country_code: str
    street_number: Optional[str] = None


@dataclass
class Transaction:
    """
    Payment details of a single credit transfer.

    The amount is kept as a Decimal and written out exactly as given.
    """

    reference_identification: str
    currency_code: str
    amount: Decimal
    receiver_iban: str


@dataclass
class PostalAddress:
    """
    Standardized representation of an ISO 20022 PstlAdr (Postal Address).
    """

    street_name: Optional[str] = None
    building_number: Optional[str] = None
    post_code: Optional[str] = None
    town_name: Optional[str] = None
    country: Optional[str] = None


@dataclass
class Party:
    name: Optional[str] = None
    postal_address: Optional[PostalAddress] = None


@dataclass
class ContactDetails:
    name: Optional[str] = None
    other: Optional[str] = None


@dataclass
class InitiatingParty:
    name: Optional[str] = None
    contact_details: Optional[ContactDetails] = None


@dataclass
class CashAccount:
    """An account identified by IBAN (Id/IBAN)."""

    iban: Optional[str] = None


@dataclass
class FinancialInstitution:
    """FinInstnId block. An unset BIC is omitted, the block itself is not."""

    bic: Optional[str] = None


@dataclass
class Agent:
    financial_institution: Optional[FinancialInstitution] = field(default_factory=FinancialInstitution)


@dataclass
class PaymentIdentification:
    instruction_id: Optional[str] = None
    end_to_end_id: Optional[str] = None


@dataclass
class PaymentTypeInformation:
    """PmtTpInf block. Always present on a transaction and left empty."""


@dataclass
class InstructedAmount:
    currency: Optional[str] = None
    value: Optional[Decimal] = None


@dataclass
class CreditTransferTransaction:
    """
    Level C of a pain.001 message: one CdtTrfTxInf per beneficiary.
    """

    payment_id: PaymentIdentification = field(default_factory=PaymentIdentification)
    payment_type_information: Optional[PaymentTypeInformation] = field(
        default_factory=PaymentTypeInformation
    )
    amount: InstructedAmount = field(default_factory=InstructedAmount)
    creditor_agent: Optional[Agent] = field(default_factory=Agent)
    creditor: Optional[Party] = field(default_factory=Party)
    creditor_account: Optional[CashAccount] = field(default_factory=CashAccount)


@dataclass
class PaymentInstruction:
    """
    Level B of a pain.001 message (PmtInf): the debtor side shared by all
    contained transactions.
    """

    payment_information_id: Optional[str] = None
    payment_method: Optional[str] = None
    batch_booking: Optional[bool] = None
    requested_execution_date: Optional[date] = None
    debtor: Optional[Party] = field(default_factory=Party)
    debtor_account: Optional[CashAccount] = field(default_factory=CashAccount)
    debtor_agent: Optional[Agent] = field(default_factory=Agent)
    credit_transfer_transactions: List[CreditTransferTransaction] = field(default_factory=list)


@dataclass
class GroupHeader:
    """
    Level A of a pain.001 message (GrpHdr).

    Attributes:
        message_id (Optional[str]):
            GrpHdr/MsgId, supplied by the caller.
        creation_date_time (Optional[datetime]):
            GrpHdr/CreDtTm, stamped once when the builder is created.
        number_of_transactions (Optional[str]):
            GrpHdr/NbOfTxs. Kept as a string like it is on the wire.
        control_sum (Optional[Decimal]):
            GrpHdr/CtrlSum. The builder leaves this at zero.
        initiating_party (Optional[InitiatingParty]):
            GrpHdr/InitgPty with name and generator contact details.
    """

    message_id: Optional[str] = None
    creation_date_time: Optional[datetime] = None
    number_of_transactions: Optional[str] = None
    control_sum: Optional[Decimal] = None
    initiating_party: Optional[InitiatingParty] = None


@dataclass
class CustomerCreditTransferInitiation:
    group_header: GroupHeader = field(default_factory=GroupHeader)
    payment_information: List[PaymentInstruction] = field(default_factory=list)


@dataclass
class Document:
    """
    Root of a pain.001 message tree, mirroring Document/CstmrCdtTrfInitn.
    """

    customer_credit_transfer_initiation: CustomerCreditTransferInitiation = field(
        default_factory=CustomerCreditTransferInitiation
    )

    def to_dict(self) -> dict:
        """
        Converts the document tree into nested standard Python dictionaries.
        Returns:
            dict: The dictionary representation of the document.
        """
        return asdict(self)


@dataclass
class ValidationReport:
    """
    Standardized report returning the analytical state of validated input.

    Attributes:
        is_valid (bool): True if no format or checksum errors were found.
        errors (List[str]): List of precise string messages indicating which rules failed.
    """

    is_valid: bool
    errors: List[str]
