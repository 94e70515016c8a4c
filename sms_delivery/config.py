from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import ProviderConfig, ProviderName, RateLimitPolicy


class Settings(BaseSettings):
    """SMS delivery settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Service
    service_name: str = "sms-delivery"
    log_level: str = "INFO"

    # Provider selection
    sms_provider: ProviderName = ProviderName.CUSTOM
    sms_provider_timeout_seconds: float = 30.0

    # Rate limiting
    sms_rate_limit_window_seconds: int = 3600
    sms_rate_limit_max_attempts: int = 10

    # Twilio
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None

    # AWS SNS
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_region: str | None = "us-east-1"
    aws_endpoint_url: str | None = None  # For LocalStack
    sns_sender_id: str | None = None

    # Custom webhook
    sms_custom_webhook_url: str | None = None
    sms_custom_api_key: str | None = None
    sms_custom_webhook_timeout_seconds: float = 10.0

    # Redis (shared rate limit counters)
    enable_redis: bool = False
    redis_url: str | None = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_username: str | None = None
    redis_password: str | None = None

    # Phone OTP
    phone_otp_expiry_minutes: int = 5
    app_name: str | None = None
    otp_message_template: str | None = None

    @property
    def redis_connection_url(self) -> str:
        if self.redis_url:
            return self.redis_url

        auth = ""
        if self.redis_username and self.redis_password:
            auth = f"{self.redis_username}:{self.redis_password}@"
        elif self.redis_password:
            auth = f":{self.redis_password}@"
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider=self.sms_provider,
            twilio_account_sid=self.twilio_account_sid,
            twilio_auth_token=self.twilio_auth_token,
            twilio_phone_number=self.twilio_phone_number,
            aws_access_key_id=self.aws_access_key_id,
            aws_secret_access_key=self.aws_secret_access_key,
            aws_region=self.aws_region,
            aws_endpoint_url=self.aws_endpoint_url,
            sns_sender_id=self.sns_sender_id,
            custom_webhook_url=self.sms_custom_webhook_url,
            custom_webhook_api_key=self.sms_custom_api_key,
            custom_webhook_timeout_seconds=self.sms_custom_webhook_timeout_seconds,
        )

    def rate_limit_policy(self) -> RateLimitPolicy:
        return RateLimitPolicy(
            window_seconds=self.sms_rate_limit_window_seconds,
            max_attempts=self.sms_rate_limit_max_attempts,
        )


settings = Settings()
