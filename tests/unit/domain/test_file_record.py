"""
Unit tests for the FileRecord entity and file sharing value objects.
"""

from datetime import datetime, timedelta

import pytest

from sealdrop.domain.file_sharing import FileRecord, ShareId, UploadLimits
from sealdrop.domain.file_sharing.entities import epoch_seconds
from sealdrop.domain.file_sharing.value_objects import InvalidShareIdError


class TestShareId:
    """Test ShareId value object."""

    def test_generate_is_url_safe_and_unique(self):
        ids = {str(ShareId.generate()) for _ in range(200)}

        assert len(ids) == 200
        for value in ids:
            assert ShareId.is_well_formed(value)
            assert len(value) >= 22

    @pytest.mark.parametrize("value", ["", "short", "a" * 65, "has space in it!!", "../../etc/passwd0"])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidShareIdError):
            ShareId(value)
        assert ShareId.is_well_formed(value) is False

    def test_accepts_dash_and_underscore(self):
        assert ShareId.is_well_formed("abc-DEF_123-xyz_09")


class TestUploadLimits:
    def test_ciphertext_allowance_covers_tag(self):
        limits = UploadLimits(max_file_size=1000)
        assert limits.max_ciphertext_size == 1016

    def test_defaults(self):
        limits = UploadLimits()
        assert limits.max_file_size == 100 * 1024 * 1024
        assert (limits.min_downloads, limits.max_downloads) == (1, 100)
        assert (limits.min_expiry_hours, limits.max_expiry_hours) == (1, 168)


class TestFileRecordCreation:
    """Test FileRecord.create factory."""

    def test_deadline_is_upload_time_plus_expiry(self, record_factory, fixed_datetime):
        record = record_factory(fixed_datetime, expiry_hours=48)

        assert record.uploaded_at == fixed_datetime
        assert record.expires_at == fixed_datetime + timedelta(hours=48)

    def test_new_record_state(self, record_factory, fixed_datetime):
        record = record_factory(fixed_datetime, max_downloads=3)

        assert record.download_count == 0
        assert record.is_expired is False
        assert record.remaining_downloads == 3
        assert record.requires_password is False
        assert ShareId.is_well_formed(record.id)

    def test_ids_differ_between_records(self, record_factory, fixed_datetime):
        assert record_factory(fixed_datetime).id != record_factory(fixed_datetime).id


class TestFileRecordState:
    """Test expiry, exhaustion and activity checks."""

    def test_deadline_boundary_is_inclusive(self, sample_record):
        assert sample_record.is_past_deadline(sample_record.expires_at) is False
        assert sample_record.is_past_deadline(
            sample_record.expires_at + timedelta(microseconds=1)
        ) is True

    def test_flag_counts_as_expired_before_deadline(self, sample_record, fixed_datetime):
        sample_record.is_expired = True
        assert sample_record.is_past_deadline(fixed_datetime) is True

    def test_exhaustion(self, record_factory, fixed_datetime):
        record = record_factory(fixed_datetime, max_downloads=2)
        record.download_count = 1
        assert record.is_exhausted() is False

        record.download_count = 2
        assert record.is_exhausted() is True
        assert record.remaining_downloads == 0

    def test_is_active(self, sample_record, fixed_datetime):
        assert sample_record.is_active(fixed_datetime) is True
        assert sample_record.is_active(fixed_datetime + timedelta(days=2)) is False

        sample_record.download_count = 1
        assert sample_record.is_active(fixed_datetime) is False


class TestFileRecordSerialization:
    def test_dict_round_trip(self, record_factory, fixed_datetime):
        record = record_factory(fixed_datetime, owner_id="owner-1", password_hash="pbkdf2:x$y$z")
        record.download_count = 1

        restored = FileRecord.from_dict(record.to_dict())

        assert restored == record

    def test_persistence_dict_carries_sortable_deadline(self, sample_record):
        data = sample_record.to_dict()
        assert data["expires_at_ts"] == epoch_seconds(sample_record.expires_at)

    def test_public_dict_hides_secrets(self, record_factory, fixed_datetime):
        record = record_factory(fixed_datetime, password_hash="pbkdf2:secret")

        public = record.to_public_dict(fixed_datetime)

        assert "exportedKey" not in public
        assert "nonce" not in public
        for value in public.values():
            assert value != record.ciphertext_ref
            assert value != record.password_hash
            assert value != record.exported_key
        assert public["requiresPassword"] is True
        assert public["isExpired"] is False
        assert public["expiryDate"] == record.expires_at.isoformat()


def test_epoch_seconds():
    assert epoch_seconds(datetime(1970, 1, 2)) == 86400.0
