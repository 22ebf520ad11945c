import copy

import boto3
import pytest
from moto import mock_aws

from openapi_audit.config import AuditorOptions


BUCKET_NAME = "openapi-audit-test"
REGION = "us-east-1"

_OPENAPI_DOCUMENT = {
    "openapi": "3.0.3",
    "info": {"title": "Test API", "version": "1.0.0"},
    "paths": {
        "/items": {
            "get": {"responses": {"200": {"description": "ok"}}},
            "post": {"responses": {"201": {"description": "created"}, "400": {"description": "bad"}}},
        },
        "/items/{id}": {
            "parameters": [{"name": "id", "in": "path", "required": True}],
            "get": {"responses": {"200": {"description": "ok"}, "404": {"description": "missing"}}},
        },
        "/health": {
            "get": {"responses": {"200": {"description": "ok"}}},
        },
    },
}


@pytest.fixture
def openapi_document():
    return copy.deepcopy(_OPENAPI_DOCUMENT)


@pytest.fixture
def s3_bucket():
    """Provide a mocked S3 bucket for testing."""
    with mock_aws():
        client = boto3.client("s3", region_name=REGION)
        client.create_bucket(Bucket=BUCKET_NAME)
        yield client


@pytest.fixture
def options(tmp_path):
    generated = tmp_path / "generated"
    return AuditorOptions(
        schema_path=str(generated / "openapi-schema.json"),
        traffic_dir=str(generated / "traffic"),
        report_path=str(generated / "audit-report.md"),
    )
