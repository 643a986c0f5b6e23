#!/usr/bin/env python3
import aws_cdk as cdk
import os

from clickstream_analytics.stack_A_storage import ClickstreamStorageStack
from clickstream_analytics.stack_B_record_transform import RecordTransformStack
from clickstream_analytics.stack_C_delivery import ClickstreamDeliveryStack
from clickstream_analytics.stack_D_ingestion_api import ClickstreamIngestionApiStack
from clickstream_analytics.stack_E_analytics import ClickstreamAnalyticsStack
from clickstream_analytics.stack_F_athena_views import ClickstreamAthenaViewsStack

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("AWS_ACCOUNT_ID"),
    region=os.getenv("AWS_REGION", "us-east-2")
)

prefix = os.getenv("CLICKSTREAM_PREFIX", "clickstream")

# Módulo A
storage = ClickstreamStorageStack(
    app,
    "ClickstreamStorageStack",
    env=env
)

# Módulo B
transform = RecordTransformStack(
    app,
    "RecordTransformStack",
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    env=env
)

# Módulo C
delivery = ClickstreamDeliveryStack(
    app,
    "ClickstreamDeliveryStack",
    clicks_bucket=storage.clicks_bucket,
    transform_fn=transform.transform_fn,
    stream_name=f"{prefix}-delivery",
    env=env
)

# Módulo D
ingestion_api = ClickstreamIngestionApiStack(
    app,
    "ClickstreamIngestionApiStack",
    delivery_stream_name=delivery.delivery_stream_name,
    delivery_stream_arn=delivery.delivery_stream_arn,
    env=env
)

# Módulo E
analytics = ClickstreamAnalyticsStack(
    app,
    "ClickstreamAnalyticsStack",
    clicks_bucket_name=storage.clicks_bucket.bucket_name,
    scan_cutoff_gb=int(os.getenv("ATHENA_SCAN_CUTOFF_GB", "1")),
    env=env
)

# Módulo F
views = ClickstreamAthenaViewsStack(
    app,
    "ClickstreamAthenaViewsStack",
    athena_database=analytics.athena_database,
    clicks_table=analytics.clicks_table,
    athena_output_bucket=analytics.athena_output_bucket,
    clicks_bucket=storage.clicks_bucket,
    workgroup=analytics.workgroup,
    env=env
)
# La vista necesita la tabla y el workgroup ya creados
views.add_dependency(analytics)


app.synth()
