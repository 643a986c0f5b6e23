import base64
import logging
import os


def _log_level(value):
    level = logging.getLevelName((value or "INFO").strip().upper())
    # getLevelName devuelve "Level X" para nombres desconocidos
    return level if isinstance(level, int) else logging.INFO


logger = logging.getLogger()
logger.setLevel(_log_level(os.environ.get("LOG_LEVEL")))

RESULT_OK = "Ok"
RESULT_FAILED = "ProcessingFailed"


class MalformedBatchError(ValueError):
    """The invocation envelope cannot be processed at all."""


def handler(event, context):
    records = _batch_records(event)
    output = []

    for record in records:
        record_id = record["recordId"]
        raw_data = record.get("data")

        try:
            payload = _decode(raw_data) + "\n"
            output.append({
                "recordId": record_id,
                "result": RESULT_OK,
                "data": base64.b64encode(payload.encode("utf-8")).decode("ascii"),
            })
        except ValueError as e:
            # Solo falla este record; Firehose lo manda al prefijo de errores
            logger.warning("Record %s failed: %s", record_id, e)
            output.append({
                "recordId": record_id,
                "result": RESULT_FAILED,
                "data": raw_data if isinstance(raw_data, str) else "",
            })

    failed = sum(1 for r in output if r["result"] == RESULT_FAILED)
    logger.info("Processed %d records (%d failed)", len(output), failed)

    return {"records": output}


def _decode(raw_data):
    if not isinstance(raw_data, str):
        raise ValueError(f"data must be a base64 string, got {type(raw_data).__name__}")

    # binascii.Error y UnicodeDecodeError son ValueError
    return base64.b64decode(raw_data, validate=True).decode("utf-8")


def _batch_records(event):
    if not isinstance(event, dict):
        raise MalformedBatchError("event must be an object")

    records = event.get("records")
    if not isinstance(records, list):
        raise MalformedBatchError("event.records must be a list")

    for i, record in enumerate(records):
        if not isinstance(record, dict) or not isinstance(record.get("recordId"), str):
            raise MalformedBatchError(f"record {i} has no recordId")

    return records
