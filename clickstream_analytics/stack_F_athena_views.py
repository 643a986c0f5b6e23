from aws_cdk import (
    Stack,
    CustomResource,
    Duration,
    aws_athena as athena,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_s3 as s3,
    custom_resources as cr,
)
from constructs import Construct


class ClickstreamAthenaViewsStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        athena_database: str,
        clicks_table: str,
        athena_output_bucket: s3.IBucket,
        clicks_bucket: s3.IBucket,
        workgroup: athena.CfnWorkGroup,
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        view_lambda = lambda_.Function(
            self,
            "CreateClickstreamViewsLambda",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="handler.main",
            code=lambda_.Code.from_asset("lambda/athena_views"),
            timeout=Duration.seconds(60),
            environment={
                "ATHENA_DATABASE": athena_database,
                "CLICKS_TABLE": clicks_table,
                "ATHENA_WORKGROUP": workgroup.name,
            },
        )

        view_lambda.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "athena:StartQueryExecution",
                    "athena:GetQueryExecution",
                    "athena:GetQueryResults",
                ],
                resources=[
                    f"arn:aws:athena:{self.region}:{self.account}:workgroup/{workgroup.name}"
                ],
            )
        )

        view_lambda.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "glue:GetDatabase",
                    "glue:GetTable",
                    "glue:CreateTable",
                    "glue:UpdateTable",
                    "glue:DeleteTable",
                ],
                resources=[
                    f"arn:aws:glue:{self.region}:{self.account}:catalog",
                    f"arn:aws:glue:{self.region}:{self.account}:database/{athena_database}",
                    f"arn:aws:glue:{self.region}:{self.account}:table/{athena_database}/*",
                ],
            )
        )

        # Athena escribe resultados y valida la tabla leyendo el bucket de clicks
        athena_output_bucket.grant_read_write(view_lambda)
        clicks_bucket.grant_read(view_lambda)

        provider = cr.Provider(
            self,
            "AthenaViewProvider",
            on_event_handler=view_lambda,
        )

        CustomResource(
            self,
            "ClickstreamAthenaViews",
            service_token=provider.service_token,
        )

        self.view_lambda = view_lambda
