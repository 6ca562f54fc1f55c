"""Tests for the S3 document store."""

import pytest
from botocore.exceptions import ClientError

from jurist.exceptions import DependencyFailure, ValidationError


class TestValidation:
    @pytest.mark.parametrize("mime_type", ["image/jpeg", "image/png", "application/pdf"])
    def test_allowed_types(self, document_store, mime_type):
        document_store.validate(b"data", mime_type)

    def test_rejects_other_types(self, document_store):
        with pytest.raises(ValidationError) as exc:
            document_store.validate(b"data", "text/html")
        assert exc.value.details["field"] == "mime_type"

    def test_size_limit_is_inclusive(self, document_store):
        document_store.validate(b"x" * 1024, "application/pdf")
        with pytest.raises(ValidationError):
            document_store.validate(b"x" * 1025, "application/pdf")


class TestStorage:
    @pytest.mark.asyncio
    async def test_store_returns_public_url(self, document_store, s3_client):
        url = await document_store.store(b"%PDF", "application/pdf", "diplomas")

        assert url.startswith("https://cdn.test/documents/diplomas/")
        assert url.endswith(".pdf")
        kwargs = s3_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "documents"
        assert kwargs["ContentType"] == "application/pdf"
        assert kwargs["Key"] == url.removeprefix("https://cdn.test/documents/")

    @pytest.mark.asyncio
    async def test_store_failure(self, document_store, s3_client):
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "500", "Message": "boom"}}, "PutObject"
        )
        with pytest.raises(DependencyFailure):
            await document_store.store(b"%PDF", "application/pdf", "licenses")

    @pytest.mark.asyncio
    async def test_delete_uses_key(self, document_store, s3_client):
        await document_store.delete("https://cdn.test/documents/photos/abc.jpg")
        s3_client.delete_object.assert_called_once_with(Bucket="documents", Key="photos/abc.jpg")
