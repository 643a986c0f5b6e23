import os

import aws_cdk as core
import pytest

from clickstream_analytics.stack_A_storage import ClickstreamStorageStack
from clickstream_analytics.stack_B_record_transform import RecordTransformStack
from clickstream_analytics.stack_C_delivery import ClickstreamDeliveryStack
from clickstream_analytics.stack_D_ingestion_api import ClickstreamIngestionApiStack
from clickstream_analytics.stack_E_analytics import ClickstreamAnalyticsStack
from clickstream_analytics.stack_F_athena_views import ClickstreamAthenaViewsStack

from tests.unit.lambdas import PROJECT_ROOT


@pytest.fixture(scope="session")
def stacks():
    # Los assets "lambda/<name>" son relativos a la raíz, igual que con cdk.json
    previous_cwd = os.getcwd()
    os.chdir(PROJECT_ROOT)
    try:
        app = core.App()

        storage = ClickstreamStorageStack(app, "ClickstreamStorageStack")
        transform = RecordTransformStack(app, "RecordTransformStack", log_level="DEBUG")
        delivery = ClickstreamDeliveryStack(
            app,
            "ClickstreamDeliveryStack",
            clicks_bucket=storage.clicks_bucket,
            transform_fn=transform.transform_fn,
        )
        ingestion_api = ClickstreamIngestionApiStack(
            app,
            "ClickstreamIngestionApiStack",
            delivery_stream_name=delivery.delivery_stream_name,
            delivery_stream_arn=delivery.delivery_stream_arn,
        )
        analytics = ClickstreamAnalyticsStack(
            app,
            "ClickstreamAnalyticsStack",
            clicks_bucket_name=storage.clicks_bucket.bucket_name,
            scan_cutoff_gb=2,
        )
        views = ClickstreamAthenaViewsStack(
            app,
            "ClickstreamAthenaViewsStack",
            athena_database=analytics.athena_database,
            clicks_table=analytics.clicks_table,
            athena_output_bucket=analytics.athena_output_bucket,
            clicks_bucket=storage.clicks_bucket,
            workgroup=analytics.workgroup,
        )
        views.add_dependency(analytics)

        # Sintetiza aquí, mientras el cwd apunta a la raíz del proyecto
        app.synth()
    finally:
        os.chdir(previous_cwd)

    return {
        "storage": storage,
        "transform": transform,
        "delivery": delivery,
        "ingestion_api": ingestion_api,
        "analytics": analytics,
        "views": views,
    }
