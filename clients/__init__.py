# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    get_database_url,
    get_valkey_url,
    get_email_config,
    get_webhook_url,
    get_recaptcha_secret,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.email_client import EmailGatewayClient, EmailGatewayError, DeliveryInfo
from clients.webhook_client import WebhookClient, WebhookError
from clients.recaptcha_client import RecaptchaVerifier, RecaptchaResult
