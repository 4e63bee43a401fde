import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from iso20022_generator.models import (
    Document,
    Initialization,
    Receiver,
    Transaction,
    ValidationReport,
)


class Validator:
    """
    Optional pre-validation of builder input and finished documents.

    The builder itself accepts anything it is given. Run these checks first
    when input comes from an untrusted source; they only report findings and
    never raise or alter the data.
    """

    _bic_pattern = re.compile(r"\A[A-Z]{4}[A-Z]{2}[A-Z0-9]{2}([A-Z0-9]{3})?\Z")
    _iban_format_pattern = re.compile(r"\A[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}\Z")
    _currency_pattern = re.compile(r"\A[A-Z]{3}\Z")
    _country_pattern = re.compile(r"\A[A-Z]{2}\Z")

    @staticmethod
    def _validate_bic(bic: Optional[str]) -> Optional[str]:
        """
        Validates ISO 9362 BIC formatting strictly mapping to 8 or 11
        alphanumeric constraints. A blank BIC is allowed since it is optional.
        """
        if bic is None or not bic.strip():
            return None

        if not Validator._bic_pattern.match(bic):
            return f"Invalid BIC format: '{bic}'. Must match ISO 9362 standard 8 or 11 characters."

        return None

    @staticmethod
    def _validate_iban(iban: Optional[str]) -> Optional[str]:
        """
        Validates an International Bank Account Number (IBAN) using the
        Modulo-97 algorithm.
        Returns None if valid, or an error string if invalid.
        """
        if iban is None or not iban.strip():
            return "IBAN is missing."

        # Spaces are common in printed IBANs, everything else is rejected
        formatted_iban = iban.replace(" ", "").upper()

        if not Validator._iban_format_pattern.match(formatted_iban):
            return f"Invalid IBAN format: '{iban.strip()}' does not meet ISO 13616 standards."

        # Move the first four characters to the end, then replace letters with digits (A=10 ... Z=35)
        rearranged = formatted_iban[4:] + formatted_iban[:4]
        numeric_iban = "".join(str(ord(char) - 55) if char.isalpha() else char for char in rearranged)

        if int(numeric_iban) % 97 != 1:
            return f"Invalid IBAN checksum: '{formatted_iban}'. Failed international Modulo-97 algorithm."

        return None

    @staticmethod
    def _validate_required(value: Optional[str], label: str) -> Optional[str]:
        if value is None or not str(value).strip():
            return f"{label} is missing or empty."
        return None

    @staticmethod
    def _validate_currency(currency: Optional[str]) -> Optional[str]:
        if currency is None or not Validator._currency_pattern.match(currency):
            return f"currency must be exactly 3 uppercase letters, found: '{currency}'"
        return None

    @staticmethod
    def _validate_amount(amount) -> Optional[str]:
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            return f"amount is not a decimal number: '{amount}'"
        if not value.is_finite() or value <= 0:
            return f"amount must be a positive number, found: '{amount}'"
        return None

    @staticmethod
    def _report(errors: List[str]) -> ValidationReport:
        return ValidationReport(is_valid=len(errors) == 0, errors=errors)

    @staticmethod
    def validate_initialization(init: Initialization) -> ValidationReport:
        """
        Checks the sender information used to create a builder.
        """
        errors = []

        for value, label in (
            (init.unique_document_id, "unique_document_id"),
            (init.sender_party_name, "sender_party_name"),
        ):
            err = Validator._validate_required(value, label)
            if err:
                errors.append(err)

        if init.execution_date is None:
            errors.append("execution_date is missing.")

        iban_err = Validator._validate_iban(init.sender_iban)
        if iban_err:
            errors.append(f"[Sender Account] {iban_err}")

        bic_err = Validator._validate_bic(init.sender_bic)
        if bic_err:
            errors.append(f"[Sender] {bic_err}")

        return Validator._report(errors)

    @staticmethod
    def validate_transaction(receiver: Receiver, transaction: Transaction) -> ValidationReport:
        """
        Checks the inputs of a single ``add_transaction`` call.
        """
        errors = []

        for value, label in (
            (receiver.name, "receiver name"),
            (receiver.street_name, "receiver street_name"),
            (receiver.zip, "receiver zip"),
            (receiver.city, "receiver city"),
            (transaction.reference_identification, "reference_identification"),
        ):
            err = Validator._validate_required(value, label)
            if err:
                errors.append(err)

        if receiver.country_code is None or not Validator._country_pattern.match(receiver.country_code):
            errors.append(
                f"country_code must be exactly 2 uppercase letters, found: '{receiver.country_code}'"
            )

        currency_err = Validator._validate_currency(transaction.currency_code)
        if currency_err:
            errors.append(currency_err)

        amount_err = Validator._validate_amount(transaction.amount)
        if amount_err:
            errors.append(amount_err)

        iban_err = Validator._validate_iban(transaction.receiver_iban)
        if iban_err:
            errors.append(f"[Receiver Account] {iban_err}")

        return Validator._report(errors)

    @staticmethod
    def validate(document: Document) -> ValidationReport:
        """
        Executes the account, BIC and amount checks against a finished document tree,
        including the consistency of the header's transaction count.
        """
        errors = []
        initiation = document.customer_credit_transfer_initiation
        header = initiation.group_header

        total = sum(len(p.credit_transfer_transactions) for p in initiation.payment_information)
        if header.number_of_transactions != str(total):
            errors.append(
                f"NbOfTxs is '{header.number_of_transactions}' but the document holds {total} transaction(s)."
            )

        for payment in initiation.payment_information:
            if payment.debtor_account is not None:
                iban_err = Validator._validate_iban(payment.debtor_account.iban)
                if iban_err:
                    errors.append(f"[Debtor Account] {iban_err}")

            if payment.debtor_agent is not None and payment.debtor_agent.financial_institution is not None:
                bic_err = Validator._validate_bic(payment.debtor_agent.financial_institution.bic)
                if bic_err:
                    errors.append(f"[Debtor Agent] {bic_err}")

            for tx in payment.credit_transfer_transactions:
                label = tx.payment_id.instruction_id
                currency_err = Validator._validate_currency(tx.amount.currency)
                if currency_err:
                    errors.append(f"[Transaction {label}] {currency_err}")
                amount_err = Validator._validate_amount(tx.amount.value)
                if amount_err:
                    errors.append(f"[Transaction {label}] {amount_err}")
                if tx.creditor_account is not None:
                    iban_err = Validator._validate_iban(tx.creditor_account.iban)
                    if iban_err:
                        errors.append(f"[Transaction {label} Creditor Account] {iban_err}")

        return Validator._report(errors)
