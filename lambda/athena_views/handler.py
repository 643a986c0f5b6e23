import os
import time
import boto3

athena = boto3.client("athena")

DATABASE = os.environ["ATHENA_DATABASE"]
WORKGROUP = os.environ["ATHENA_WORKGROUP"]
CLICKS_TABLE = os.environ["CLICKS_TABLE"]

QUERY_TIMEOUT_SECONDS = 25

VIEW_NAME = "clicks_by_element"

VIEW_SQL = f"""
CREATE OR REPLACE VIEW {DATABASE}.{VIEW_NAME} AS
SELECT
    datehour,
    element_clicked,
    source_menu,
    COUNT(*)          AS clicks,
    AVG(time_spent)   AS avg_time_spent
FROM {DATABASE}.{CLICKS_TABLE}
WHERE datehour IS NOT NULL
GROUP BY datehour, element_clicked, source_menu
"""

DROP_SQL = f"DROP VIEW IF EXISTS {DATABASE}.{VIEW_NAME}"


def main(event, context):
    request_type = event["RequestType"]

    if request_type == "Delete":
        run_query(DROP_SQL)
        return {"PhysicalResourceId": VIEW_NAME, "Data": {"status": "dropped"}}

    run_query(VIEW_SQL)
    return {"PhysicalResourceId": VIEW_NAME, "Data": {"status": "ok"}}


def run_query(sql):
    res = athena.start_query_execution(
        QueryString=sql,
        QueryExecutionContext={"Database": DATABASE},
        WorkGroup=WORKGROUP,
    )

    qid = res["QueryExecutionId"]
    print("Athena query started:", qid)

    start = time.time()

    while True:
        status = athena.get_query_execution(QueryExecutionId=qid)
        state = status["QueryExecution"]["Status"]["State"]

        if state in ("SUCCEEDED", "FAILED", "CANCELLED"):
            break
        if time.time() - start > QUERY_TIMEOUT_SECONDS:
            raise TimeoutError(f"Athena query {qid} did not finish in {QUERY_TIMEOUT_SECONDS}s")

        time.sleep(1)

    print("Athena query", qid, "finished:", state)

    if state != "SUCCEEDED":
        reason = status["QueryExecution"]["Status"].get("StateChangeReason", "unknown")
        raise RuntimeError(f"Athena query {qid} {state}: {reason}")

    return qid
