"""Google service account credentials value object."""

import json
from dataclasses import dataclass
from typing import Any

from saastral_api.exceptions import InvalidCredentialsError

_PROVIDER = "google_workspace"
_REQUIRED_FIELDS = ("client_email", "private_key", "client_id", "project_id")


@dataclass(frozen=True, slots=True)
class ServiceAccountCredentials:
    """The fields of a Google service account key file that we rely on."""

    client_email: str
    private_key: str
    client_id: str
    project_id: str
    private_key_id: str | None = None

    @classmethod
    def from_json(cls, key_file: str | dict[str, Any]) -> "ServiceAccountCredentials":
        """Parse and validate a service account key file.

        Args:
            key_file: Raw JSON text or an already decoded dict

        Returns:
            ServiceAccountCredentials

        Raises:
            InvalidCredentialsError: If the JSON is malformed, the key type is
                not ``service_account`` or a required field is missing
        """
        if isinstance(key_file, str):
            try:
                data = json.loads(key_file)
            except json.JSONDecodeError as e:
                raise InvalidCredentialsError(_PROVIDER, "Service account key is not valid JSON") from e
        else:
            data = key_file

        if not isinstance(data, dict):
            raise InvalidCredentialsError(_PROVIDER, "Service account key must be a JSON object")

        if data.get("type") != "service_account":
            raise InvalidCredentialsError(_PROVIDER, 'Key file type must be "service_account"')

        missing = [field for field in _REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise InvalidCredentialsError(
                _PROVIDER, f"Missing required fields: {', '.join(missing)}"
            )

        return cls(
            client_email=data["client_email"],
            private_key=data["private_key"],
            client_id=str(data["client_id"]),
            project_id=data["project_id"],
            private_key_id=data.get("private_key_id"),
        )

    def is_valid(self) -> bool:
        return bool(
            self.client_email
            and "@" in self.client_email
            and "PRIVATE KEY" in self.private_key
            and self.client_id
            and self.project_id
        )

    def to_key_file(self) -> dict[str, Any]:
        key_file: dict[str, Any] = {
            "type": "service_account",
            "client_email": self.client_email,
            "private_key": self.private_key,
            "client_id": self.client_id,
            "project_id": self.project_id,
        }
        if self.private_key_id:
            key_file["private_key_id"] = self.private_key_id
        return key_file
