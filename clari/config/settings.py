from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AwsConfig(BaseSettings):
    """AWS credentials and region"""

    region: str = "us-east-1"
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class DeployConfig(BaseSettings):
    """Stack, artifact and wiring configuration for the deploy flow."""

    stack_name: str = "clari-ai-lambda-stack"
    bucket_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DEPLOY_BUCKET_NAME", "AWS_S3_BUCKET_NAME"),
    )
    template_path: str = "infra/lambda-stack.yaml"
    function_source_dir: str = "infra/lambda"
    build_dir: str = ".build"
    artifact_name: str = "lambda-deployment.zip"
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("DEPLOY_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    capabilities: list[str] = ["CAPABILITY_IAM"]

    poll_interval_seconds: float = Field(default=5.0, gt=0)
    max_poll_attempts: int = Field(default=60, ge=1)
    max_delete_attempts: int = Field(
        default=120,
        ge=1,
        description="Upper bound on re-probes while a failed stack is deleted.",
    )

    function_arn_output: str = "LambdaFunctionArn"
    function_name_output: str = "LambdaFunctionName"

    notification_events: list[str] = ["s3:ObjectCreated:*"]
    notification_prefix: Optional[str] = None

    wait_for_code_update: bool = True
    code_update_max_attempts: int = Field(default=60, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="DEPLOY_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Clari Interview Coach Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    deploy_log_file: str = "logs/deploy.log"

    # AWS
    aws: AwsConfig = Field(default_factory=AwsConfig)

    # Deploy
    deploy: DeployConfig = Field(default_factory=DeployConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
