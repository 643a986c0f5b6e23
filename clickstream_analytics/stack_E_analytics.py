from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    aws_athena as athena,
    aws_glue as glue,
    aws_s3 as s3,
)
from constructs import Construct

from clickstream_analytics.stack_C_delivery import CLICKS_PREFIX

DATABASE_NAME = "clickstream"
CLICKS_TABLE_NAME = "clicks"
WORKGROUP_NAME = "clickstream"

DEFAULT_SCAN_CUTOFF_GB = 1


class ClickstreamAnalyticsStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        clicks_bucket_name: str,
        scan_cutoff_gb: int = DEFAULT_SCAN_CUTOFF_GB,
        **kwargs,
    ):
        super().__init__(scope, construct_id, **kwargs)

        athena_output_bucket = s3.Bucket(
            self,
            "AthenaOutputBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            lifecycle_rules=[
                s3.LifecycleRule(expiration=Duration.days(30))
            ],
        )

        clicks_location = f"s3://{clicks_bucket_name}/{CLICKS_PREFIX}"

        # 1. Glue Database
        database = glue.CfnDatabase(
            self,
            "ClickstreamDatabase",
            catalog_id=self.account,
            database_input=glue.CfnDatabase.DatabaseInputProperty(
                name=DATABASE_NAME
            ),
        )

        # 2. Tabla de clicks (JSON por línea, schema-on-read)
        glue.CfnTable(
            self,
            "ClicksTable",
            catalog_id=self.account,
            database_name=database.ref,
            table_input=glue.CfnTable.TableInputProperty(
                name=CLICKS_TABLE_NAME,
                table_type="EXTERNAL_TABLE",
                parameters={
                    "classification": "json",

                    # PARTITION PROJECTION sobre la hora de ingesta de Firehose
                    "projection.enabled": "true",
                    "projection.datehour.type": "date",
                    "projection.datehour.format": "yyyy/MM/dd/HH",
                    "projection.datehour.range": "2021/01/01/00,NOW",
                    "projection.datehour.interval": "1",
                    "projection.datehour.interval.unit": "HOURS",
                    "storage.location.template": clicks_location + "${datehour}/",
                },
                partition_keys=[
                    glue.CfnTable.ColumnProperty(name="datehour", type="string"),
                ],
                storage_descriptor=glue.CfnTable.StorageDescriptorProperty(
                    location=clicks_location,
                    input_format="org.apache.hadoop.mapred.TextInputFormat",
                    output_format="org.apache.hadoop.hive.ql.io.HiveIgnoreKeyTextOutputFormat",
                    serde_info=glue.CfnTable.SerdeInfoProperty(
                        serialization_library="org.openx.data.jsonserde.JsonSerDe",
                        parameters={
                            "paths": "element_clicked,time_spent,source_menu,created_at",
                        },
                    ),
                    columns=[
                        glue.CfnTable.ColumnProperty(name="element_clicked", type="string"),
                        glue.CfnTable.ColumnProperty(name="time_spent", type="int"),
                        glue.CfnTable.ColumnProperty(name="source_menu", type="string"),
                        glue.CfnTable.ColumnProperty(name="created_at", type="string"),
                    ],
                ),
            ),
        )

        # 3. WorkGroup: resultados en el bucket de este stack y corte por bytes escaneados
        workgroup = athena.CfnWorkGroup(
            self,
            "ClickstreamWorkGroup",
            name=WORKGROUP_NAME,
            description=f"Clickstream queries, {scan_cutoff_gb} GB scan limit per query",
            state="ENABLED",
            recursive_delete_option=True,
            work_group_configuration=athena.CfnWorkGroup.WorkGroupConfigurationProperty(
                enforce_work_group_configuration=True,
                publish_cloud_watch_metrics_enabled=True,
                bytes_scanned_cutoff_per_query=scan_cutoff_gb * 1024 ** 3,
                result_configuration=athena.CfnWorkGroup.ResultConfigurationProperty(
                    output_location=f"s3://{athena_output_bucket.bucket_name}/",
                ),
            ),
        )

        # EXPORTS PARA OTROS STACKS
        self.athena_database = database.ref
        self.clicks_table = CLICKS_TABLE_NAME
        self.athena_output_bucket = athena_output_bucket
        self.workgroup = workgroup
