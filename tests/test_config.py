"""Tests for configuration loading and submission validation."""

import tempfile
from pathlib import Path

import pydantic
import pytest
import yaml

from civic_reputation.core.config import DB_PATH_ENV, ReputationConfig, load_config
from civic_reputation.core.errors import (
    ConfigurationError,
    MissingFieldError,
    NotFoundError,
    ValidationError,
)
from civic_reputation.core.validation import is_valid_email, is_valid_gps, sanitize_text
from civic_reputation.models import (
    CitizenRatingSubmission,
    ComplaintSubmission,
    IssueReportSubmission,
    QualificationSubmission,
)


class TestReputationConfig:
    """Tests for ReputationConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ReputationConfig()
        assert config.scoring.max_distance_meters == 1000.0
        assert config.scoring.default_rating == 5.0
        assert config.scoring.default_project_location.latitude == 27.7172
        assert config.scoring.default_project_location.longitude == 85.324

    def test_empty_database_path_fails(self):
        """Test an empty database path is rejected."""
        with pytest.raises(pydantic.ValidationError):
            ReputationConfig(database_path="  ")

    def test_invalid_location_fails(self):
        """Test an out-of-range default location is rejected."""
        with pytest.raises(pydantic.ValidationError):
            ReputationConfig.model_validate(
                {"scoring": {"default_project_location": {"latitude": 91, "longitude": 0}}}
            )

    def test_env_overrides_database_path(self, monkeypatch):
        """Test the environment variable wins over the configured path."""
        monkeypatch.setenv(DB_PATH_ENV, "/tmp/other.duckdb")
        config = ReputationConfig(database_path="./data/x.duckdb")
        assert config.get_database_path() == Path("/tmp/other.duckdb")
        assert config.database_url == "duckdb:////tmp/other.duckdb"


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_valid_yaml(self, monkeypatch):
        """Test loading a YAML configuration file."""
        monkeypatch.delenv(DB_PATH_ENV, raising=False)
        data = {
            "database_path": "./data/test.duckdb",
            "log_level": "DEBUG",
            "scoring": {"max_distance_meters": 250, "default_rating": 4.5},
        }
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(data, f)
            config_path = f.name

        config = load_config(config_path)
        assert config.scoring.max_distance_meters == 250
        assert config.scoring.default_rating == 4.5
        assert config.log_level == "DEBUG"
        assert config.get_database_path() == Path("./data/test.duckdb")

        Path(config_path).unlink()

    def test_none_gives_defaults(self):
        """Test no path returns the default configuration."""
        assert load_config(None) == ReputationConfig()

    def test_missing_file_raises(self):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")

    def test_non_mapping_raises(self, tmp_path):
        """Test a YAML file that isn't a mapping raises ConfigurationError."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- database_path\n- log_level\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(config_path)

    def test_example_config_is_valid(self):
        """Test the shipped example configuration loads."""
        example = Path(__file__).resolve().parent.parent / "config.example.yaml"
        config = load_config(example)
        assert config.scoring.max_distance_meters == 1000


class TestErrors:
    """Tests for error formatting."""

    def test_suggestion_is_appended(self):
        """Test messages carry the label and suggestion."""
        error = NotFoundError("Contract", "abc", "Create it first.")
        assert str(error) == "[Not Found] Contract not found: abc\n[Suggestion] Create it first."
        assert error.entity == "Contract"
        assert error.entity_id == "abc"

    def test_missing_field_is_validation_error(self):
        """Test MissingFieldError is a ValidationError."""
        error = MissingFieldError("name")
        assert isinstance(error, ValidationError)
        assert "Missing required field 'name'" in str(error)


class TestValidationHelpers:
    """Tests for input validation helpers."""

    def test_email(self):
        assert is_valid_email("asha@example.com")
        assert not is_valid_email("asha@example")
        assert not is_valid_email("asha example.com")

    def test_gps(self):
        assert is_valid_gps(27.7, 85.3)
        assert is_valid_gps(-90, 180)
        assert not is_valid_gps(90.1, 0)
        assert not is_valid_gps(0, -180.5)

    def test_sanitize(self):
        assert sanitize_text("  <b>bad</b>  ") == "bbad/b"
        assert len(sanitize_text("x" * 3000)) == 2000


class TestSubmissions:
    """Tests for submission payload validation."""

    def test_complaint_invalid_email(self):
        """Test a malformed email is rejected at construction."""
        with pytest.raises(pydantic.ValidationError):
            ComplaintSubmission(text="late", email="nope", contractor_id="c1")

    def test_complaint_invalid_gps(self):
        """Test out-of-range coordinates are rejected."""
        with pytest.raises(pydantic.ValidationError):
            ComplaintSubmission(
                text="late", email="a@b.co", contractor_id="c1", latitude=95, longitude=0
            )

    def test_complaint_text_sanitized(self):
        """Test complaint text is trimmed and stripped of angle brackets."""
        submission = ComplaintSubmission(text=" <late> ", email="a@b.co", contractor_id="c1")
        assert submission.text == "late"
        assert not submission.has_coordinates

    def test_complaint_image_not_dumped(self):
        """Test raw image bytes stay out of serialized payloads."""
        submission = ComplaintSubmission(
            text="late", email="a@b.co", contractor_id="c1", image=b"\xff\xd8"
        )
        assert "image" not in submission.model_dump()

    def test_rating_out_of_range(self):
        """Test citizen ratings must be within [0, 5]."""
        with pytest.raises(pydantic.ValidationError):
            CitizenRatingSubmission(
                contract_id="k", contractor_id="c", citizen_id="u", rating=5.5
            )

    def test_issue_severity_normalized(self):
        """Test severities are upper-cased."""
        submission = IssueReportSubmission(
            contract_id="k",
            contractor_id="c",
            citizen_id="u",
            title="Crack",
            category="CONTRACTOR_FAULT",
            issue_date="2024-05-01T00:00:00Z",
            severity=" high ",
        )
        assert submission.severity == "HIGH"

    def test_issue_unknown_category(self):
        """Test unknown categories are rejected."""
        with pytest.raises(pydantic.ValidationError):
            IssueReportSubmission(
                contract_id="k",
                contractor_id="c",
                citizen_id="u",
                title="Crack",
                category="ACT_OF_GOD",
                issue_date="2024-05-01T00:00:00Z",
            )

    def test_qualification_certificate(self):
        """Test a certificate needs both URL and number."""
        assert not QualificationSubmission(contractor_id="c", certificate_url="u").has_certificate
        assert QualificationSubmission(
            contractor_id="c", certificate_url="u", certificate_number="n"
        ).has_certificate
