"""
M-Pesa SDK Data Models

Request payloads carry the exact Daraja field names as aliases, so
``to_wire()`` always emits the same key set in the same order.
"""

import time
from enum import Enum
from typing import Optional, Dict, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    SecretStr,
    field_validator,
)

from .environment import Environment


class CommandId(str, Enum):
    """Daraja transaction command identifiers"""

    TRANSACTION_REVERSAL = "TransactionReversal"
    SALARY_PAYMENT = "SalaryPayment"
    BUSINESS_PAYMENT = "BusinessPayment"
    PROMOTION_PAYMENT = "PromotionPayment"
    ACCOUNT_BALANCE = "AccountBalance"
    CUSTOMER_PAY_BILL_ONLINE = "CustomerPayBillOnline"
    CUSTOMER_BUY_GOODS_ONLINE = "CustomerBuyGoodsOnline"
    TRANSACTION_STATUS_QUERY = "TransactionStatusQuery"
    CHECK_IDENTITY = "CheckIdentity"
    BUSINESS_PAY_BILL = "BusinessPayBill"
    BUSINESS_BUY_GOODS = "BusinessBuyGoods"
    DISBURSE_FUNDS_TO_BUSINESS = "DisburseFundsToBusiness"
    BUSINESS_TO_BUSINESS_TRANSFER = "BusinessToBusinessTransfer"
    BUSINESS_TRANSFER_FROM_MMF_TO_UTILITY = "BusinessTransferFromMMFToUtility"

    def __str__(self) -> str:
        return self.value


class IdentifierType(int, Enum):
    """Party identification scheme"""

    MSISDN = 1
    TILL_NUMBER = 2
    SHORTCODE = 4


class ResponseType(str, Enum):
    """Default action when a C2B validation URL is unreachable"""

    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    def __str__(self) -> str:
        return self.value


class ClientIdentity(BaseModel):
    """Long-lived credentials of one client handle"""

    model_config = ConfigDict(frozen=True)

    consumer_key: str
    consumer_secret: SecretStr
    environment: Environment
    initiator_password: SecretStr = SecretStr("")


class BearerToken(BaseModel):
    """OAuth access token returned by ``/oauth/v1/generate``"""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(3600, description="Validity in seconds")
    acquired_at: float = Field(default_factory=time.time)

    @property
    def expires_at(self) -> float:
        return self.acquired_at + self.expires_in

    def is_expired(self, skew: float = 0.0) -> bool:
        """True once the token is within ``skew`` seconds of its expiry."""
        return time.time() >= self.expires_at - skew

    def __str__(self) -> str:
        return self.access_token


# ===================================================================
# Request payloads
# ===================================================================


class RequestPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize under the canonical Daraja field names."""
        return self.model_dump(by_alias=True, mode="json")


class B2CPayload(RequestPayload):
    """B2C payment request"""

    initiator_name: str = Field(..., alias="InitiatorName")
    security_credential: str = Field(..., alias="SecurityCredential")
    command_id: CommandId = Field(..., alias="CommandID")
    amount: NonNegativeInt = Field(..., alias="Amount")
    party_a: str = Field(..., alias="PartyA")
    party_b: str = Field(..., alias="PartyB")
    remarks: str = Field(..., alias="Remarks")
    queue_timeout_url: str = Field(..., alias="QueueTimeOutURL")
    result_url: str = Field(..., alias="ResultURL")
    occasion: str = Field("", alias="Occasion")


class B2BPayload(RequestPayload):
    """B2B payment request"""

    initiator: str = Field(..., alias="Initiator")
    security_credential: str = Field(..., alias="SecurityCredential")
    command_id: CommandId = Field(..., alias="CommandID")
    sender_identifier_type: IdentifierType = Field(
        IdentifierType.SHORTCODE, alias="SenderIdentifierType"
    )
    # Daraja spells this field "Reciever"; the corrected spelling is rejected.
    receiver_identifier_type: IdentifierType = Field(
        IdentifierType.SHORTCODE, alias="RecieverIdentifierType"
    )
    amount: NonNegativeInt = Field(..., alias="Amount")
    party_a: str = Field(..., alias="PartyA")
    party_b: str = Field(..., alias="PartyB")
    account_reference: str = Field(..., alias="AccountReference")
    remarks: str = Field(..., alias="Remarks")
    queue_timeout_url: str = Field(..., alias="QueueTimeOutURL")
    result_url: str = Field(..., alias="ResultURL")


class C2BRegisterPayload(RequestPayload):
    """C2B confirmation/validation URL registration"""

    validation_url: str = Field(..., alias="ValidationURL")
    confirmation_url: str = Field(..., alias="ConfirmationURL")
    response_type: ResponseType = Field(ResponseType.COMPLETED, alias="ResponseType")
    short_code: str = Field(..., alias="ShortCode")


class C2BSimulatePayload(RequestPayload):
    """C2B payment simulation (sandbox)"""

    command_id: CommandId = Field(CommandId.CUSTOMER_PAY_BILL_ONLINE, alias="CommandID")
    amount: NonNegativeInt = Field(..., alias="Amount")
    msisdn: str = Field(..., alias="Msisdn")
    bill_ref_number: str = Field("", alias="BillRefNumber")
    short_code: str = Field(..., alias="ShortCode")


class AccountBalancePayload(RequestPayload):
    """Account balance query"""

    command_id: CommandId = Field(CommandId.ACCOUNT_BALANCE, alias="CommandID")
    party_a: str = Field(..., alias="PartyA")
    identifier_type: Literal["4"] = Field("4", alias="IdentifierType")
    remarks: str = Field(..., alias="Remarks")
    initiator: str = Field(..., alias="Initiator")
    security_credential: str = Field(..., alias="SecurityCredential")
    queue_timeout_url: str = Field(..., alias="QueueTimeOutURL")
    result_url: str = Field(..., alias="ResultURL")


# ===================================================================
# Responses
# ===================================================================


class DarajaResponse(BaseModel):
    """
    Acknowledgement common to all Daraja operations.

    ``response_code`` of "0" means the request was accepted for processing.
    Any other value, or no value, is a rejection the caller must handle.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    conversation_id: Optional[str] = Field(None, alias="ConversationID")
    originator_conversation_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("OriginatorConversationID", "OriginatorCoversationID"),
        serialization_alias="OriginatorConversationID",
    )
    response_code: Optional[str] = Field(None, alias="ResponseCode")
    response_description: Optional[str] = Field(None, alias="ResponseDescription")
    request_id: Optional[str] = Field(None, alias="requestId")
    error_code: Optional[str] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")

    @field_validator("response_code", "error_code", mode="before")
    @classmethod
    def _coerce_code(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v

    @property
    def is_accepted(self) -> bool:
        return self.response_code == "0"


class B2CResponse(DarajaResponse):
    """B2C acknowledgement"""


class B2BResponse(DarajaResponse):
    """B2B acknowledgement"""


class C2BRegisterResponse(DarajaResponse):
    """C2B URL registration acknowledgement"""


class C2BSimulateResponse(DarajaResponse):
    """C2B simulation acknowledgement"""

    customer_message: Optional[str] = Field(None, alias="CustomerMessage")


class AccountBalanceResponse(DarajaResponse):
    """Account balance acknowledgement; the balance itself arrives on ResultURL"""
