from aws_cdk import (
    Stack,
    CfnOutput,
    aws_apigateway as apigw,
    aws_iam as iam,
)
from constructs import Construct

# Firehose espera Data en base64; el Lambda de transformación añade el "\n"
PUT_RECORD_TEMPLATE = """{
    "DeliveryStreamName": "%s",
    "Record": {
        "Data": "$util.base64Encode($input.json('$'))"
    }
}"""

ACCEPTED_RESPONSE = '{"status": "accepted"}'
ERROR_RESPONSE = '{"status": "error"}'

CLICK_FIELDS = ["element_clicked", "time_spent", "source_menu", "created_at"]


class ClickstreamIngestionApiStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        delivery_stream_name: str,
        delivery_stream_arn: str,
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        api_role = iam.Role(
            self,
            "ApiFirehoseRole",
            assumed_by=iam.ServicePrincipal("apigateway.amazonaws.com"),
            description="Lets API Gateway put clicks into Firehose",
        )

        api_role.add_to_policy(
            iam.PolicyStatement(
                actions=["firehose:PutRecord"],
                resources=[delivery_stream_arn],
            )
        )

        api = apigw.RestApi(
            self,
            "ClickstreamApi",
            rest_api_name="clickstream-api",
            description="Receives clickstream events and forwards them to Firehose",
            deploy_options=apigw.StageOptions(
                stage_name="prod",
                throttling_rate_limit=100,
                throttling_burst_limit=200,
            ),
        )

        click_model = api.add_model(
            "ClickModel",
            content_type="application/json",
            model_name="Click",
            schema=apigw.JsonSchema(
                schema=apigw.JsonSchemaVersion.DRAFT4,
                title="Click",
                type=apigw.JsonSchemaType.OBJECT,
                required=CLICK_FIELDS,
                properties={
                    "element_clicked": apigw.JsonSchema(type=apigw.JsonSchemaType.STRING),
                    "time_spent": apigw.JsonSchema(type=apigw.JsonSchemaType.INTEGER),
                    "source_menu": apigw.JsonSchema(type=apigw.JsonSchemaType.STRING),
                    "created_at": apigw.JsonSchema(type=apigw.JsonSchemaType.STRING),
                },
            ),
        )

        body_validator = api.add_request_validator(
            "ClickBodyValidator",
            validate_request_body=True,
            validate_request_parameters=False,
        )

        put_record = apigw.AwsIntegration(
            service="firehose",
            action="PutRecord",
            integration_http_method="POST",
            options=apigw.IntegrationOptions(
                credentials_role=api_role,
                passthrough_behavior=apigw.PassthroughBehavior.NEVER,
                request_templates={
                    "application/json": PUT_RECORD_TEMPLATE % delivery_stream_name,
                },
                integration_responses=[
                    apigw.IntegrationResponse(
                        status_code="200",
                        response_templates={
                            "application/json": ACCEPTED_RESPONSE,
                        },
                    ),
                    apigw.IntegrationResponse(
                        status_code="500",
                        selection_pattern="5\\d{2}",
                        response_templates={
                            "application/json": ERROR_RESPONSE,
                        },
                    ),
                ],
            ),
        )

        clicks = api.root.add_resource("clicks")
        clicks.add_method(
            "POST",
            put_record,
            request_models={"application/json": click_model},
            request_validator=body_validator,
            method_responses=[
                apigw.MethodResponse(status_code="200"),
                apigw.MethodResponse(status_code="500"),
            ],
        )

        CfnOutput(
            self,
            "ClicksEndpointUrl",
            value=api.url_for_path("/clicks"),
            description="POST clickstream events here",
        )
