"""S3 upload trigger for the transcription function.

Transcription itself is delegated to the external pipeline; this handler only
resolves which uploaded objects the event refers to.
"""

import logging
import os
from urllib.parse import unquote_plus

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def handler(event, context):
    bucket_default = os.environ.get("BUCKET_NAME", "")
    objects = []
    for record in event.get("Records", []):
        s3_info = record.get("s3", {})
        bucket = s3_info.get("bucket", {}).get("name") or bucket_default
        key = unquote_plus(s3_info.get("object", {}).get("key", ""))
        if key:
            objects.append({"bucket": bucket, "key": key})
            logger.info("Received upload s3://%s/%s", bucket, key)
    return {"objects": objects}
