import amazon_pay

# amazon_pay version
VERSION = amazon_pay.__version__

# name reported in the User-Agent header of every MWS request
SDK_NAME = "amazon-pay-sdk-python"

# version of the OffAmazonPayments MWS API, part of the request path and the signed string
API_VERSION = "2013-01-01"

# MWS path prefixes
SANDBOX_PATH = "OffAmazonPayments_Sandbox"
LIVE_PATH = "OffAmazonPayments"

# region code to MWS endpoint
MWS_ENDPOINTS = {
    "jp": "mws.amazonservices.jp",
    "uk": "mws-eu.amazonservices.com",
    "de": "mws-eu.amazonservices.com",
    "eu": "mws-eu.amazonservices.com",
    "us": "mws.amazonservices.com",
    "na": "mws.amazonservices.com",
}

# region code to payment domain, used by ListOrderReference
PAYMENT_DOMAINS = {
    "jp": "FE_JPY",
    "uk": "EU_GBP",
    "de": "EU_EUR",
    "eu": "EU_EUR",
    "us": "NA_USD",
    "na": "NA_USD",
}

# region code to login-with-Amazon domain
LOGIN_DOMAINS = {
    "jp": "amazon.co.jp",
    "uk": "amazon.co.uk",
    "de": "amazon.de",
    "eu": "amazon.co.uk",
    "us": "amazon.com",
    "na": "amazon.com",
}

# request signing
SIGNATURE_METHOD = "HmacSHA256"
SIGNATURE_VERSION = "2"

# payload signing for the checkout (v2) API
PAYLOAD_SIGNING_ALGORITHM = "AMZN-PAY-RSASSA-PSS"
PSS_SALT_LENGTH = 20

# IPN / SNS
HEADER_SNS_MESSAGE_TYPE = "x-amz-sns-message-type"
SNS_MESSAGE_TYPE_NOTIFICATION = "Notification"
SNS_CERT_COMMON_NAME = "sns.amazonaws.com"
SNS_CERT_HOST_PATTERN = r"^sns\.[a-zA-Z0-9\-]{3,}\.amazonaws\.com(\.cn)?$"
SNS_SIGNABLE_KEYS = ("Message", "MessageId", "Timestamp", "TopicArn", "Type")

# retry policy for MWS calls: additional attempts after the first one, and seconds slept per try
MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = {1: 1, 2: 4, 3: 10, 4: 0}

# total attempts when downloading the SNS signing certificate
CERT_DOWNLOAD_ATTEMPTS = 3

# default timeout (seconds) for HTTP calls
DEFAULT_HTTP_TIMEOUT = 60

# placeholder for redacted values in logs
REMOVED_PLACEHOLDER = "*REMOVED*"

# keys/elements which may contain PII and are redacted before logging
SENSITIVE_FIELDS = (
    "Buyer",
    "PhysicalDestination",
    "BillingAddress",
    "AuthorizationBillingAddress",
    "SellerNote",
    "SellerAuthorizationNote",
    "SellerCaptureNote",
    "SellerRefundNote",
)

TRUE_STRINGS = ("1", "true", "True")
FALSE_STRINGS = ("0", "false", "False")

LOG_LEVELS = ("debug", "info", "warn", "warning", "error", "fatal", "critical")

DEFAULT_ENCODING = "utf-8"

# folder for config profiles (`<profile>.env` files)
CONFIG_DIR_NAME = ".amazon_pay"
