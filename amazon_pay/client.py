import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from amazon_pay import config
from amazon_pay.constants import (
    DEFAULT_HTTP_TIMEOUT,
    LIVE_PATH,
    MWS_ENDPOINTS,
    PAYMENT_DOMAINS,
    SANDBOX_PATH,
)
from amazon_pay.exceptions import ConfigurationError
from amazon_pay.logging.setup import get_log_level_from_config, setup_logging
from amazon_pay.models import BillingAgreement, OrderReference, ProviderCredit, parse_reference_id
from amazon_pay.request import Request
from amazon_pay.response import Response
from amazon_pay.signing import hash_and_hex, load_private_key, sign_payload
from amazon_pay.utils.backoff import RetrySchedule
from amazon_pay.utils.encoding import (
    DefaultParameters,
    serialize_indexed_list,
    serialize_member_list,
)
from amazon_pay.utils.http import ProxyConfig

LOG = logging.getLogger(__name__)

BILLING_AGREEMENT_STATE_XPATH = (
    "GetBillingAgreementDetailsResponse/GetBillingAgreementDetailsResult/"
    "BillingAgreementDetails/BillingAgreementStatus"
)

PROVIDER_CREDIT_FIELDS = (
    ("provider_id", "ProviderId"),
    ("amount", "CreditAmount.Amount"),
    ("currency_code", "CreditAmount.CurrencyCode"),
)
PROVIDER_CREDIT_REVERSAL_FIELDS = (
    ("provider_id", "ProviderId"),
    ("amount", "CreditReversalAmount.Amount"),
    ("currency_code", "CreditReversalAmount.CurrencyCode"),
)

ProviderCredits = Iterable[Union[ProviderCredit, Mapping[str, Any]]]


class Client:
    """
    Client of the Amazon Pay (OffAmazonPayments) MWS API.

    Every action builds its required and optional parameters and hands them to ``operation``, which signs and posts
    them. Actions return a ``Response`` for any HTTP status; use ``response.success`` to check the outcome.

    Keyword arguments named like the client settings (``merchant_id``, ``currency_code``) default to the values the
    client was created with.
    """

    def __init__(
        self,
        merchant_id: str,
        access_key: str,
        secret_key: str,
        sandbox: bool = False,
        currency_code: str = "usd",
        region: str = "na",
        platform_id: str = None,
        throttle: bool = True,
        application_name: str = None,
        application_version: str = None,
        proxy: Optional[ProxyConfig] = None,
        log_enabled: bool = False,
        log_file_name: str = None,
        log_level: Union[str, int] = "DEBUG",
        private_key: Union[str, bytes, RSAPrivateKey] = None,
        timeout: Optional[float] = None,
        retry_schedule: RetrySchedule = None,
    ):
        self.merchant_id = merchant_id
        self.access_key = access_key
        self.secret_key = secret_key
        self.sandbox = sandbox
        self.currency_code = str(currency_code).upper()
        self.region = str(region).lower()
        self.mws_endpoint = MWS_ENDPOINTS.get(self.region)
        if not self.mws_endpoint:
            raise ConfigurationError(f"Invalid Region Code. ({region})")
        self.sandbox_path = SANDBOX_PATH if sandbox else LIVE_PATH
        self.platform_id = platform_id
        self.throttle = throttle
        self.application_name = application_name
        self.application_version = application_version
        self.proxy = proxy
        self.timeout = DEFAULT_HTTP_TIMEOUT if timeout is None else timeout
        self.retry_schedule = retry_schedule
        self.default_parameters = DefaultParameters(access_key=access_key, platform_id=platform_id)

        if private_key is not None and not isinstance(private_key, RSAPrivateKey):
            private_key = load_private_key(private_key)
        self.private_key = private_key

        self.log_enabled = log_enabled
        self.log_file_name = log_file_name
        self.log_level = log_level
        if self.log_enabled:
            setup_logging(log_level, log_file_name)

    @staticmethod
    def from_env(**kwargs) -> "Client":
        """Creates a client from the ``AMAZON_PAY_*`` environment variables, ``kwargs`` take precedence."""
        settings = dict(
            merchant_id=config.MERCHANT_ID,
            access_key=config.ACCESS_KEY,
            secret_key=config.SECRET_KEY,
            sandbox=config.SANDBOX,
            currency_code=config.CURRENCY_CODE,
            region=config.REGION,
            platform_id=config.PLATFORM_ID,
            throttle=config.THROTTLE,
            application_name=config.APPLICATION_NAME,
            application_version=config.APPLICATION_VERSION,
            proxy=ProxyConfig.from_config(),
            log_enabled=bool(config.AMAZON_PAY_LOG or config.LOG_FILE or config.DEBUG),
            log_file_name=config.LOG_FILE,
            log_level=get_log_level_from_config(),
            private_key=config.PRIVATE_KEY,
            timeout=config.HTTP_TIMEOUT,
        )
        settings.update(kwargs)
        if not settings["merchant_id"] or not settings["access_key"] or not settings["secret_key"]:
            raise ConfigurationError(
                "AMAZON_PAY_MERCHANT_ID, AMAZON_PAY_ACCESS_KEY and AMAZON_PAY_SECRET_KEY need to be set"
            )
        return Client(**settings)

    def operation(self, parameters: Mapping[str, Any], optional: Mapping[str, Any]) -> Response:
        """Signs and posts an MWS action, the single path every action takes to the network."""
        LOG.debug("Calling MWS action %s", parameters.get("Action"))
        return Request(
            parameters,
            optional,
            self.default_parameters.to_dict(),
            self.mws_endpoint,
            self.sandbox_path,
            self.secret_key,
            proxy=self.proxy,
            throttle=self.throttle,
            application_name=self.application_name,
            application_version=self.application_version,
            log_enabled=self.log_enabled,
            timeout=self.timeout,
            retry_schedule=self.retry_schedule,
        ).send_post()

    # --- API actions

    def get_service_status(self) -> Response:
        return self.operation({"Action": "GetServiceStatus"}, {})

    def create_order_reference_for_id(
        self,
        id: str,
        id_type: str,
        inherit_shipping_address: bool = None,
        confirm_now: bool = None,
        amount=None,
        currency_code: str = None,
        platform_id: str = None,
        seller_note: str = None,
        seller_order_id: str = None,
        store_name: str = None,
        custom_information: str = None,
        supplementary_data: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """Creates an order reference for the given object, e.g. a billing agreement (``id_type="BillingAgreement"``)."""
        parameters = {
            "Action": "CreateOrderReferenceForId",
            "SellerId": merchant_id or self.merchant_id,
            "Id": id,
            "IdType": id_type,
        }
        optional = {
            "InheritShippingAddress": inherit_shipping_address,
            "ConfirmNow": confirm_now,
            "OrderReferenceAttributes.OrderTotal.Amount": amount,
            "OrderReferenceAttributes.OrderTotal.CurrencyCode": self._currency_for(amount, currency_code),
            "OrderReferenceAttributes.PlatformId": platform_id,
            "OrderReferenceAttributes.SellerNote": seller_note,
            "OrderReferenceAttributes.SellerOrderAttributes.SellerOrderId": seller_order_id,
            "OrderReferenceAttributes.SellerOrderAttributes.StoreName": store_name,
            "OrderReferenceAttributes.SellerOrderAttributes.CustomInformation": custom_information,
            "OrderReferenceAttributes.SellerOrderAttributes.SupplementaryData": supplementary_data,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def get_billing_agreement_details(
        self,
        amazon_billing_agreement_id: str,
        address_consent_token: str = None,
        access_token: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "GetBillingAgreementDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
        }
        optional = {
            "AccessToken": access_token,
            "AddressConsentToken": address_consent_token,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def set_billing_agreement_details(
        self,
        amazon_billing_agreement_id: str,
        platform_id: str = None,
        seller_note: str = None,
        seller_billing_agreement_id: str = None,
        custom_information: str = None,
        store_name: str = None,
        merchant_id: str = None,
        billing_agreement_type: str = None,
        subscription_amount=None,
        subscription_currency_code: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "SetBillingAgreementDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
        }
        attributes = "BillingAgreementAttributes"
        optional = {
            f"{attributes}.PlatformId": platform_id,
            f"{attributes}.SellerNote": seller_note,
            f"{attributes}.SellerBillingAgreementAttributes.SellerBillingAgreementId": seller_billing_agreement_id,
            f"{attributes}.SellerBillingAgreementAttributes.CustomInformation": custom_information,
            f"{attributes}.SellerBillingAgreementAttributes.StoreName": store_name,
            f"{attributes}.BillingAgreementType": billing_agreement_type,
            f"{attributes}.SubscriptionAmount.Amount": subscription_amount,
            f"{attributes}.SubscriptionAmount.CurrencyCode": self._currency_for(
                subscription_amount, subscription_currency_code
            ),
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def confirm_billing_agreement(
        self,
        amazon_billing_agreement_id: str,
        merchant_id: str = None,
        success_url: str = None,
        failure_url: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "ConfirmBillingAgreement",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
        }
        optional = {
            "SuccessUrl": success_url,
            "FailureUrl": failure_url,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def validate_billing_agreement(
        self,
        amazon_billing_agreement_id: str,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "ValidateBillingAgreement",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def authorize_on_billing_agreement(
        self,
        amazon_billing_agreement_id: str,
        authorization_reference_id: str,
        amount,
        currency_code: str = None,
        seller_authorization_note: str = None,
        transaction_timeout: int = None,
        capture_now: bool = False,
        soft_descriptor: str = None,
        seller_note: str = None,
        platform_id: str = None,
        custom_information: str = None,
        seller_order_id: str = None,
        store_name: str = None,
        inherit_shipping_address: bool = None,
        supplementary_data: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "AuthorizeOnBillingAgreement",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
            "AuthorizationReferenceId": authorization_reference_id,
            "AuthorizationAmount.Amount": amount,
            "AuthorizationAmount.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            "SellerAuthorizationNote": seller_authorization_note,
            "TransactionTimeout": transaction_timeout,
            "CaptureNow": capture_now,
            "SoftDescriptor": soft_descriptor,
            "SellerNote": seller_note,
            "PlatformId": platform_id,
            "SellerOrderAttributes.CustomInformation": custom_information,
            "SellerOrderAttributes.SellerOrderId": seller_order_id,
            "SellerOrderAttributes.StoreName": store_name,
            "SellerOrderAttributes.SupplementaryData": supplementary_data,
            "InheritShippingAddress": inherit_shipping_address,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def close_billing_agreement(
        self,
        amazon_billing_agreement_id: str,
        closure_reason: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "CloseBillingAgreement",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonBillingAgreementId": amazon_billing_agreement_id,
        }
        optional = {
            "ClosureReason": closure_reason,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def list_order_reference(
        self,
        query_id: str,
        query_id_type: str,
        created_time_range_start: str = None,
        created_time_range_end: str = None,
        sort_order: str = None,
        page_size: int = None,
        order_reference_status_list_filter: Iterable[str] = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """Lists the order references of a seller order id (``query_id_type="SellerOrderId"``)."""
        parameters = {
            "Action": "ListOrderReference",
            "SellerId": merchant_id or self.merchant_id,
            "QueryId": query_id,
            "QueryIdType": query_id_type,
        }
        optional = {
            "CreatedTimeRange.StartTime": created_time_range_start,
            "CreatedTimeRange.EndTime": created_time_range_end,
            "SortOrder": sort_order,
            "PageSize": page_size,
            "PaymentDomain": PAYMENT_DOMAINS[self.region],
            "MWSAuthToken": mws_auth_token,
        }
        if order_reference_status_list_filter:
            optional.update(
                serialize_indexed_list(
                    "OrderReferenceStatusListFilter.OrderReferenceStatus",
                    order_reference_status_list_filter,
                )
            )
        return self.operation(parameters, optional)

    def list_order_reference_by_next_token(self, next_page_token: str) -> Response:
        parameters = {
            "Action": "ListOrderReferenceByNextToken",
            "SellerId": self.merchant_id,
            "NextPageToken": next_page_token,
        }
        return self.operation(parameters, {})

    def get_merchant_account_status(
        self, merchant_id: str = None, mws_auth_token: str = None
    ) -> Response:
        parameters = {
            "Action": "GetMerchantAccountStatus",
            "SellerId": merchant_id or self.merchant_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def get_order_reference_details(
        self,
        amazon_order_reference_id: str,
        address_consent_token: str = None,
        access_token: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """
        Returns the details of an order reference. ``access_token`` (or the older ``address_consent_token``) gives
        access to the full shipping address of the buyer.
        """
        parameters = {
            "Action": "GetOrderReferenceDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
        }
        optional = {
            "AccessToken": access_token or address_consent_token,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def set_order_reference_details(
        self,
        amazon_order_reference_id: str,
        amount,
        currency_code: str = None,
        platform_id: str = None,
        seller_note: str = None,
        seller_order_id: str = None,
        request_payment_authorization: bool = None,
        store_name: str = None,
        order_item_categories: Iterable[str] = None,
        custom_information: str = None,
        supplementary_data: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        attributes = "OrderReferenceAttributes"
        parameters = {
            "Action": "SetOrderReferenceDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
            f"{attributes}.OrderTotal.Amount": amount,
            f"{attributes}.OrderTotal.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            f"{attributes}.PlatformId": platform_id,
            f"{attributes}.RequestPaymentAuthorization": request_payment_authorization,
            f"{attributes}.SellerNote": seller_note,
            f"{attributes}.SellerOrderAttributes.SellerOrderId": seller_order_id,
            f"{attributes}.SellerOrderAttributes.StoreName": store_name,
            f"{attributes}.SellerOrderAttributes.CustomInformation": custom_information,
            f"{attributes}.SellerOrderAttributes.SupplementaryData": supplementary_data,
            "MWSAuthToken": mws_auth_token,
        }
        if order_item_categories:
            optional.update(self.categories_list(attributes, order_item_categories))
        return self.operation(parameters, optional)

    def set_order_attributes(
        self,
        amazon_order_reference_id: str,
        amount=None,
        currency_code: str = None,
        platform_id: str = None,
        seller_note: str = None,
        seller_order_id: str = None,
        payment_service_provider_id: str = None,
        payment_service_provider_order_id: str = None,
        request_payment_authorization: bool = None,
        store_name: str = None,
        order_item_categories: Iterable[str] = None,
        custom_information: str = None,
        supplementary_data: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """Updates attributes of an order reference, also after it was confirmed (within the limits of MWS)."""
        attributes = "OrderAttributes"
        provider = f"{attributes}.PaymentServiceProviderAttributes"
        parameters = {
            "Action": "SetOrderAttributes",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
        }
        optional = {
            f"{attributes}.OrderTotal.Amount": amount,
            f"{attributes}.OrderTotal.CurrencyCode": self._currency_for(amount, currency_code),
            f"{attributes}.PlatformId": platform_id,
            f"{attributes}.SellerNote": seller_note,
            f"{attributes}.SellerOrderAttributes.SellerOrderId": seller_order_id,
            f"{provider}.PaymentServiceProviderId": payment_service_provider_id,
            f"{provider}.PaymentServiceProviderOrderId": payment_service_provider_order_id,
            f"{attributes}.RequestPaymentAuthorization": request_payment_authorization,
            f"{attributes}.SellerOrderAttributes.StoreName": store_name,
            f"{attributes}.SellerOrderAttributes.CustomInformation": custom_information,
            f"{attributes}.SellerOrderAttributes.SupplementaryData": supplementary_data,
            "MWSAuthToken": mws_auth_token,
        }
        if order_item_categories:
            optional.update(self.categories_list(attributes, order_item_categories))
        return self.operation(parameters, optional)

    def confirm_order_reference(
        self,
        amazon_order_reference_id: str,
        success_url: str = None,
        failure_url: str = None,
        authorization_amount=None,
        currency_code: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "ConfirmOrderReference",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
        }
        optional = {
            "SuccessUrl": success_url,
            "FailureUrl": failure_url,
            "AuthorizationAmount.Amount": authorization_amount,
            "AuthorizationAmount.CurrencyCode": self._currency_for(authorization_amount, currency_code),
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def cancel_order_reference(
        self,
        amazon_order_reference_id: str,
        cancelation_reason: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "CancelOrderReference",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
        }
        optional = {
            "CancelationReason": cancelation_reason,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def authorize(
        self,
        amazon_order_reference_id: str,
        authorization_reference_id: str,
        amount,
        currency_code: str = None,
        seller_authorization_note: str = None,
        transaction_timeout: int = None,
        capture_now: bool = None,
        soft_descriptor: str = None,
        provider_credit_details: ProviderCredits = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "Authorize",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
            "AuthorizationReferenceId": authorization_reference_id,
            "AuthorizationAmount.Amount": amount,
            "AuthorizationAmount.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            "SellerAuthorizationNote": seller_authorization_note,
            "TransactionTimeout": transaction_timeout,
            "CaptureNow": capture_now,
            "SoftDescriptor": soft_descriptor,
            "MWSAuthToken": mws_auth_token,
        }
        if provider_credit_details:
            optional.update(self.provider_credit_details(provider_credit_details))
        return self.operation(parameters, optional)

    def get_authorization_details(
        self, amazon_authorization_id: str, merchant_id: str = None, mws_auth_token: str = None
    ) -> Response:
        parameters = {
            "Action": "GetAuthorizationDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonAuthorizationId": amazon_authorization_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def capture(
        self,
        amazon_authorization_id: str,
        capture_reference_id: str,
        amount,
        currency_code: str = None,
        seller_capture_note: str = None,
        soft_descriptor: str = None,
        provider_credit_details: ProviderCredits = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "Capture",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonAuthorizationId": amazon_authorization_id,
            "CaptureReferenceId": capture_reference_id,
            "CaptureAmount.Amount": amount,
            "CaptureAmount.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            "SellerCaptureNote": seller_capture_note,
            "SoftDescriptor": soft_descriptor,
            "MWSAuthToken": mws_auth_token,
        }
        if provider_credit_details:
            optional.update(self.provider_credit_details(provider_credit_details))
        return self.operation(parameters, optional)

    def get_capture_details(
        self, amazon_capture_id: str, merchant_id: str = None, mws_auth_token: str = None
    ) -> Response:
        parameters = {
            "Action": "GetCaptureDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonCaptureId": amazon_capture_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def refund(
        self,
        amazon_capture_id: str,
        refund_reference_id: str,
        amount,
        currency_code: str = None,
        seller_refund_note: str = None,
        soft_descriptor: str = None,
        provider_credit_reversal_details: ProviderCredits = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "Refund",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonCaptureId": amazon_capture_id,
            "RefundReferenceId": refund_reference_id,
            "RefundAmount.Amount": amount,
            "RefundAmount.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            "SellerRefundNote": seller_refund_note,
            "SoftDescriptor": soft_descriptor,
            "MWSAuthToken": mws_auth_token,
        }
        if provider_credit_reversal_details:
            optional.update(self.provider_credit_reversal_details(provider_credit_reversal_details))
        return self.operation(parameters, optional)

    def get_refund_details(
        self, amazon_refund_id: str, merchant_id: str = None, mws_auth_token: str = None
    ) -> Response:
        parameters = {
            "Action": "GetRefundDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonRefundId": amazon_refund_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def close_authorization(
        self,
        amazon_authorization_id: str,
        closure_reason: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "CloseAuthorization",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonAuthorizationId": amazon_authorization_id,
        }
        optional = {
            "ClosureReason": closure_reason,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def close_order_reference(
        self,
        amazon_order_reference_id: str,
        closure_reason: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "CloseOrderReference",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonOrderReferenceId": amazon_order_reference_id,
        }
        optional = {
            "ClosureReason": closure_reason,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    def get_provider_credit_details(
        self, amazon_provider_credit_id: str, merchant_id: str = None, mws_auth_token: str = None
    ) -> Response:
        parameters = {
            "Action": "GetProviderCreditDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonProviderCreditId": amazon_provider_credit_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def get_provider_credit_reversal_details(
        self,
        amazon_provider_credit_reversal_id: str,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "GetProviderCreditReversalDetails",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonProviderCreditReversalId": amazon_provider_credit_reversal_id,
        }
        return self.operation(parameters, {"MWSAuthToken": mws_auth_token})

    def reverse_provider_credit(
        self,
        amazon_provider_credit_id: str,
        credit_reversal_reference_id: str,
        amount,
        currency_code: str = None,
        credit_reversal_note: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        parameters = {
            "Action": "ReverseProviderCredit",
            "SellerId": merchant_id or self.merchant_id,
            "AmazonProviderCreditId": amazon_provider_credit_id,
            "CreditReversalReferenceId": credit_reversal_reference_id,
            "CreditReversalAmount.Amount": amount,
            "CreditReversalAmount.CurrencyCode": currency_code or self.currency_code,
        }
        optional = {
            "CreditReversalNote": credit_reversal_note,
            "MWSAuthToken": mws_auth_token,
        }
        return self.operation(parameters, optional)

    # --- helpers

    def charge(
        self,
        amazon_reference_id: str,
        authorization_reference_id: str,
        charge_amount,
        charge_currency_code: str = None,
        charge_note: str = None,
        charge_order_id: str = None,
        store_name: str = None,
        custom_information: str = None,
        soft_descriptor: str = None,
        platform_id: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """
        Charges an order reference or a billing agreement in one go, i.e. sets its details, confirms it and
        authorizes the amount with immediate capture. Returns the response of the last call made, which is the
        first failing one if a step fails.

        :raises InvalidReferenceIdError: if ``amazon_reference_id`` is neither kind of id
        """
        reference = parse_reference_id(amazon_reference_id)
        charge = dict(
            authorization_reference_id=authorization_reference_id,
            charge_amount=charge_amount,
            charge_currency_code=charge_currency_code or self.currency_code,
            charge_note=charge_note,
            charge_order_id=charge_order_id,
            store_name=store_name,
            custom_information=custom_information,
            soft_descriptor=soft_descriptor,
            platform_id=platform_id,
            merchant_id=merchant_id or self.merchant_id,
            mws_auth_token=mws_auth_token,
        )
        if isinstance(reference, OrderReference):
            return self._charge_order_reference(reference, **charge)
        return self._charge_billing_agreement(reference, **charge)

    def _charge_order_reference(
        self,
        reference: OrderReference,
        authorization_reference_id,
        charge_amount,
        charge_currency_code,
        charge_note,
        charge_order_id,
        store_name,
        custom_information,
        soft_descriptor,
        platform_id,
        merchant_id,
        mws_auth_token,
    ) -> Response:
        response = self.set_order_reference_details(
            reference.id,
            charge_amount,
            currency_code=charge_currency_code,
            platform_id=platform_id,
            seller_note=charge_note,
            seller_order_id=charge_order_id,
            store_name=store_name,
            custom_information=custom_information,
            merchant_id=merchant_id,
            mws_auth_token=mws_auth_token,
        )
        if not response.success:
            return response

        response = self.confirm_order_reference(
            reference.id, merchant_id=merchant_id, mws_auth_token=mws_auth_token
        )
        if not response.success:
            return response

        return self.authorize(
            reference.id,
            authorization_reference_id,
            charge_amount,
            currency_code=charge_currency_code,
            seller_authorization_note=charge_note,
            transaction_timeout=0,
            capture_now=True,
            soft_descriptor=soft_descriptor,
            merchant_id=merchant_id,
            mws_auth_token=mws_auth_token,
        )

    def _charge_billing_agreement(
        self,
        reference: BillingAgreement,
        authorization_reference_id,
        charge_amount,
        charge_currency_code,
        charge_note,
        charge_order_id,
        store_name,
        custom_information,
        soft_descriptor,
        platform_id,
        merchant_id,
        mws_auth_token,
    ) -> Response:
        response = self.get_billing_agreement_details(
            reference.id, merchant_id=merchant_id, mws_auth_token=mws_auth_token
        )
        state = response.get_element(BILLING_AGREEMENT_STATE_XPATH, "State") if response.success else None

        if state == "Draft":
            response = self.set_billing_agreement_details(
                reference.id,
                platform_id=platform_id,
                seller_note=charge_note,
                seller_billing_agreement_id=charge_order_id,
                store_name=store_name,
                custom_information=custom_information,
                merchant_id=merchant_id,
                mws_auth_token=mws_auth_token,
            )
            if response.success:
                response = self.confirm_billing_agreement(
                    reference.id, merchant_id=merchant_id, mws_auth_token=mws_auth_token
                )
                if not response.success:
                    return response

        return self.authorize_on_billing_agreement(
            reference.id,
            authorization_reference_id,
            charge_amount,
            currency_code=charge_currency_code,
            seller_authorization_note=charge_note,
            transaction_timeout=0,
            capture_now=True,
            soft_descriptor=soft_descriptor,
            seller_note=charge_note,
            platform_id=platform_id,
            seller_order_id=charge_order_id,
            store_name=store_name,
            custom_information=custom_information,
            inherit_shipping_address=True,
            merchant_id=merchant_id,
            mws_auth_token=mws_auth_token,
        )

    def modify_order_attributes(
        self,
        amazon_order_reference_id: str,
        seller_note: str = None,
        seller_order_id: str = None,
        payment_service_provider_id: str = None,
        payment_service_provider_order_id: str = None,
        request_payment_authorization: bool = None,
        store_name: str = None,
        custom_information: str = None,
        merchant_id: str = None,
        mws_auth_token: str = None,
    ) -> Response:
        """``set_order_attributes`` without the amount, for updating an order reference after confirmation."""
        return self.set_order_attributes(
            amazon_order_reference_id,
            seller_note=seller_note,
            seller_order_id=seller_order_id,
            payment_service_provider_id=payment_service_provider_id,
            payment_service_provider_order_id=payment_service_provider_order_id,
            request_payment_authorization=request_payment_authorization,
            store_name=store_name,
            custom_information=custom_information,
            merchant_id=merchant_id,
            mws_auth_token=mws_auth_token,
        )

    def provider_credit_details(self, provider_credits: ProviderCredits) -> Dict[str, Any]:
        return serialize_member_list(
            "ProviderCreditList", self._with_currency(provider_credits), PROVIDER_CREDIT_FIELDS
        )

    def provider_credit_reversal_details(self, provider_credits: ProviderCredits) -> Dict[str, Any]:
        return serialize_member_list(
            "ProviderCreditReversalList",
            self._with_currency(provider_credits),
            PROVIDER_CREDIT_REVERSAL_FIELDS,
        )

    @staticmethod
    def categories_list(attribute_key: str, categories: Iterable[str]) -> Dict[str, Any]:
        return serialize_indexed_list(
            f"{attribute_key}.SellerOrderAttributes.OrderItemCategories.OrderItemCategory", categories
        )

    @staticmethod
    def hash_and_hex(payload: Union[str, bytes]) -> str:
        return hash_and_hex(payload)

    def sign_payload(self, payload: Union[str, Mapping[str, Any]]) -> str:
        if self.private_key is None:
            raise ConfigurationError("A private key is required to sign payloads")
        return sign_payload(self.private_key, payload)

    def _currency_for(self, amount, currency_code: Optional[str]) -> Optional[str]:
        # a currency without an amount is rejected by MWS
        if amount is None:
            return None
        return currency_code or self.currency_code

    def _with_currency(self, provider_credits: ProviderCredits):
        for credit in provider_credits:
            if isinstance(credit, Mapping):
                credit = ProviderCredit(**credit)
            elif not isinstance(credit, ProviderCredit):
                credit = ProviderCredit(
                    credit.provider_id, credit.amount, getattr(credit, "currency_code", None)
                )
            yield credit._replace(currency_code=credit.currency_code or self.currency_code)
