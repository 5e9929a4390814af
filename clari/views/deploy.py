"""Pydantic schemas for the deploy endpoints."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from clari.deploy import DeployResult, DeployStage, StackSnapshot


class DeployResponse(BaseModel):
    success: bool = True
    lambda_arn: str = Field(alias="lambdaArn")
    lambda_name: str = Field(alias="lambdaName")
    bucket_name: str = Field(alias="bucketName")
    message: str
    outputs: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_result(cls, result: DeployResult) -> "DeployResponse":
        return cls(
            lambda_arn=result.function_arn,
            lambda_name=result.function_name,
            bucket_name=result.bucket_name,
            message=result.message,
            outputs=result.outputs.as_dict(),
        )


class DeployFailureResponse(BaseModel):
    success: bool = False
    error: str
    stage: Optional[str] = None


class StackStatusResponse(BaseModel):
    stack_name: str = Field(alias="stackName")
    status: str
    reason: Optional[str] = None
    outputs: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_snapshot(cls, stack_name: str, snapshot: StackSnapshot) -> "StackStatusResponse":
        return cls(
            stack_name=stack_name,
            status=snapshot.status,
            reason=snapshot.reason,
            outputs=dict(snapshot.outputs),
        )


class DeployStageResponse(BaseModel):
    order: int
    name: str
    module: str
    summary: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_stage(cls, stage: DeployStage) -> "DeployStageResponse":
        return cls.model_validate(stage)
