import pytest
from botocore.exceptions import ClientError

from app.services import file_storage as file_storage_module
from app.services.file_storage import LocalFileStorage, S3FileStorage


class RecordingS3Client:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error


def test_s3_storage_uploads_under_subdirectory(monkeypatch):
    client = RecordingS3Client()
    monkeypatch.setattr(file_storage_module.boto3, "client", lambda service, region_name=None: client)

    stored = S3FileStorage(bucket_name="moveminds", region="eu-west-1").store(
        b"%PDF", "plan.pdf", None, "resources"
    )

    call = client.calls[0]
    assert call["Bucket"] == "moveminds"
    assert call["Key"].startswith("resources/") and call["Key"].endswith(".pdf")
    assert call["ContentType"] == "application/pdf"
    assert stored.url == f"https://moveminds.s3.eu-west-1.amazonaws.com/{call['Key']}"
    assert stored.size_bytes == 4


def test_s3_storage_wraps_client_errors(monkeypatch):
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    monkeypatch.setattr(file_storage_module.boto3, "client", lambda service, region_name=None: RecordingS3Client(error))

    with pytest.raises(Exception, match="Failed to upload file"):
        S3FileStorage(bucket_name="moveminds", region="eu-west-1").store(b"data", "plan.pdf", None, "resources")


def test_local_storage_writes_file(tmp_path):
    stored = LocalFileStorage(upload_dir=str(tmp_path), base_url="http://files.test/").store(
        b"hello", "notes.txt", "text/plain", "resources"
    )

    assert stored.url.startswith("http://files.test/resources/")
    name = stored.url.rsplit("/", 1)[-1]
    assert (tmp_path / "resources" / name).read_bytes() == b"hello"
    assert stored.content_type == "text/plain"
