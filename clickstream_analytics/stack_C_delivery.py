from aws_cdk import (
    Stack,
    CfnParameter,
    RemovalPolicy,
    aws_iam as iam,
    aws_kinesisfirehose as firehose,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
)
from constructs import Construct

DEFAULT_BUFFER_INTERVAL_SECONDS = 60

CLICKS_PREFIX = "clicks/"
DELIVERY_PREFIX = CLICKS_PREFIX + "!{timestamp:yyyy/MM/dd/HH}/"
ERROR_PREFIX = "errors/!{firehose:error-output-type}/!{timestamp:yyyy/MM/dd/HH}/"


class ClickstreamDeliveryStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        clicks_bucket: s3.IBucket,
        transform_fn: lambda_.IFunction,
        stream_name: str = "clickstream-delivery",
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        buffer_interval_param = CfnParameter(
            self,
            "BufferIntervalSeconds",
            type="Number",
            default=DEFAULT_BUFFER_INTERVAL_SECONDS,
            min_value=0,
            max_value=900,
            description="Seconds Firehose buffers clicks before writing to S3",
        )

        log_group = logs.LogGroup(
            self,
            "DeliveryLogGroup",
            log_group_name=f"/aws/kinesisfirehose/{stream_name}",
            retention=logs.RetentionDays.ONE_WEEK,
            removal_policy=RemovalPolicy.DESTROY,
        )

        log_stream = logs.LogStream(
            self,
            "S3DeliveryLogStream",
            log_group=log_group,
            log_stream_name="S3Delivery",
            removal_policy=RemovalPolicy.DESTROY,
        )

        # Rol de servicio de Firehose
        firehose_role = iam.Role(
            self,
            "FirehoseDeliveryRole",
            assumed_by=iam.ServicePrincipal("firehose.amazonaws.com"),
            description="Delivers clickstream records to S3",
        )

        clicks_bucket.grant_read_write(firehose_role)

        firehose_role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "s3:AbortMultipartUpload",
                    "s3:GetBucketLocation",
                    "s3:ListBucketMultipartUploads",
                ],
                resources=[clicks_bucket.bucket_arn],
            )
        )

        firehose_role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "lambda:InvokeFunction",
                    "lambda:GetFunctionConfiguration",
                ],
                resources=[transform_fn.function_arn],
            )
        )

        log_group.grant_write(firehose_role)

        delivery_stream = firehose.CfnDeliveryStream(
            self,
            "ClickstreamDeliveryStream",
            delivery_stream_name=stream_name,
            delivery_stream_type="DirectPut",
            extended_s3_destination_configuration=firehose.CfnDeliveryStream.ExtendedS3DestinationConfigurationProperty(
                bucket_arn=clicks_bucket.bucket_arn,
                role_arn=firehose_role.role_arn,
                prefix=DELIVERY_PREFIX,
                error_output_prefix=ERROR_PREFIX,
                compression_format="UNCOMPRESSED",
                buffering_hints=firehose.CfnDeliveryStream.BufferingHintsProperty(
                    size_in_m_bs=5,
                    interval_in_seconds=buffer_interval_param.value_as_number,
                ),
                cloud_watch_logging_options=firehose.CfnDeliveryStream.CloudWatchLoggingOptionsProperty(
                    enabled=True,
                    log_group_name=log_group.log_group_name,
                    log_stream_name=log_stream.log_stream_name,
                ),
                processing_configuration=firehose.CfnDeliveryStream.ProcessingConfigurationProperty(
                    enabled=True,
                    processors=[
                        firehose.CfnDeliveryStream.ProcessorProperty(
                            type="Lambda",
                            parameters=[
                                firehose.CfnDeliveryStream.ProcessorParameterProperty(
                                    parameter_name="LambdaArn",
                                    parameter_value=transform_fn.function_arn,
                                ),
                                firehose.CfnDeliveryStream.ProcessorParameterProperty(
                                    parameter_name="BufferSizeInMBs",
                                    parameter_value="1",
                                ),
                                firehose.CfnDeliveryStream.ProcessorParameterProperty(
                                    parameter_name="BufferIntervalInSeconds",
                                    parameter_value="60",
                                ),
                            ],
                        )
                    ],
                ),
            ),
        )

        # El rol debe existir con sus políticas antes de crear el stream
        delivery_stream.node.add_dependency(firehose_role)

        self.delivery_stream_name = delivery_stream.ref
        self.delivery_stream_arn = delivery_stream.attr_arn
