from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from iso20022_generator.models import (
    Document,
    Initialization,
    Receiver,
    Transaction,
)


class PydanticInitialization(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    unique_document_id: str
    sender_party_name: str
    sender_iban: str
    execution_date: date
    sender_bic: Optional[str] = None

    def to_dataclass(self) -> Initialization:
        return Initialization(**self.model_dump())


class PydanticReceiver(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    street_name: str
    zip: str
    city: str
    country_code: str
    street_number: Optional[str] = None

    def to_dataclass(self) -> Receiver:
        return Receiver(**self.model_dump())


class PydanticTransaction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference_identification: str
    currency_code: str
    amount: Decimal
    receiver_iban: str

    def to_dataclass(self) -> Transaction:
        return Transaction(**self.model_dump())


class PydanticBatchEntry(BaseModel):
    receiver: PydanticReceiver
    transaction: PydanticTransaction


class PydanticBatch(BaseModel):
    """
    Input file layout of the ``build`` and ``validate`` commands.
    """

    initialization: PydanticInitialization
    transactions: List[PydanticBatchEntry] = Field(default_factory=list)


class PydanticPostalAddress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    street_name: Optional[str] = None
    building_number: Optional[str] = None
    post_code: Optional[str] = None
    town_name: Optional[str] = None
    country: Optional[str] = None


class PydanticParty(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = None
    postal_address: Optional[PydanticPostalAddress] = None


class PydanticContactDetails(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = None
    other: Optional[str] = None


class PydanticInitiatingParty(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = None
    contact_details: Optional[PydanticContactDetails] = None


class PydanticCashAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    iban: Optional[str] = None


class PydanticFinancialInstitution(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bic: Optional[str] = None


class PydanticAgent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    financial_institution: Optional[PydanticFinancialInstitution] = None


class PydanticPaymentIdentification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    instruction_id: Optional[str] = None
    end_to_end_id: Optional[str] = None


class PydanticInstructedAmount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    currency: Optional[str] = None
    value: Optional[Decimal] = None


class PydanticPaymentTypeInformation(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PydanticCreditTransferTransaction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: PydanticPaymentIdentification
    payment_type_information: Optional[PydanticPaymentTypeInformation] = None
    amount: PydanticInstructedAmount
    creditor_agent: Optional[PydanticAgent] = None
    creditor: Optional[PydanticParty] = None
    creditor_account: Optional[PydanticCashAccount] = None


class PydanticPaymentInstruction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_information_id: Optional[str] = None
    payment_method: Optional[str] = None
    batch_booking: Optional[bool] = None
    requested_execution_date: Optional[date] = None
    debtor: Optional[PydanticParty] = None
    debtor_account: Optional[PydanticCashAccount] = None
    debtor_agent: Optional[PydanticAgent] = None
    credit_transfer_transactions: List[PydanticCreditTransferTransaction] = Field(default_factory=list)


class PydanticGroupHeader(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message_id: Optional[str] = None
    creation_date_time: Optional[datetime] = None
    number_of_transactions: Optional[str] = None
    control_sum: Optional[Decimal] = None
    initiating_party: Optional[PydanticInitiatingParty] = None


class PydanticCustomerCreditTransferInitiation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_header: PydanticGroupHeader
    payment_information: List[PydanticPaymentInstruction] = Field(default_factory=list)


class PydanticDocument(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_credit_transfer_initiation: PydanticCustomerCreditTransferInitiation


def from_dataclass(document: Document) -> PydanticDocument:
    """
    Converts a core document tree into its Pydantic equivalent.
    """
    return PydanticDocument.model_validate(document)
