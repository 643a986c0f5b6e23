from aws_cdk import (
    Stack,
    Duration,
    aws_lambda as lambda_,
    aws_logs as logs,
)
from constructs import Construct


class RecordTransformStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        log_level: str = "INFO",
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        # Firehose da la invocación por fallida al pasar el timeout
        transform_fn = lambda_.Function(
            self,
            "RecordTransformLambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="transform.handler",
            code=lambda_.Code.from_asset("lambda/transform"),
            timeout=Duration.seconds(60),
            memory_size=128,
            log_retention=logs.RetentionDays.ONE_WEEK,
            description="Appends a newline to every Firehose record",
            environment={
                "LOG_LEVEL": log_level,
            },
        )

        self.transform_fn = transform_fn
