from __future__ import annotations

import logging
import math
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Sequence
from urllib.parse import quote, urlencode

from .config_types import DEFAULT_EXPIRATION_TTL, ClientConfig
from .errors import ConfigurationError, ValidationError
from .signing import (
    FieldKind,
    FieldValue,
    SignatureScope,
    SigningProtocol,
    canonical_string,
    get_protocol,
    sign,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChooseRequest:
    fields: dict[str, FieldValue]
    signing_string: str
    signature: str
    scope: SignatureScope
    url: str

    @property
    def uid(self) -> str:
        return str(self.fields["uid"])

    @property
    def expiration(self) -> int:
        return int(str(self.fields["expiration"]))


def _default_uid() -> str:
    return str(uuid.uuid4())


def _check_seconds(name: str, value: Any) -> None:
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise ValidationError(f"{name} must be a whole number of seconds, got {value!r}")


class PreferredPicturesClient:
    def __init__(
            self,
            cfg: ClientConfig,
            *,
            clock: Callable[[], float] | None = None,
            uid_factory: Callable[[], str] | None = None,
    ):
        self._cfg = cfg
        self._protocol = get_protocol(cfg.protocol)
        self._clock = clock or time.time
        self._uid_factory = uid_factory or _default_uid

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def protocol(self) -> SigningProtocol:
        return self._protocol

    def create_choose_url(
            self,
            *,
            choices: Sequence[str],
            tournament: str,
            choices_prefix: str | None = None,
            choices_suffix: str | None = None,
            destinations: Sequence[str] | None = None,
            destinations_prefix: str | None = None,
            destinations_suffix: str | None = None,
            ttl: int | None = None,
            expiration_ttl: int | None = None,
            json: bool | None = None,
            go: bool | None = None,
            uid: str | None = None,
            limited_signature: bool = False,
    ) -> str:
        """Build a signed URL for the choose endpoint."""
        return self.build_choose_request(
            choices=choices,
            tournament=tournament,
            choices_prefix=choices_prefix,
            choices_suffix=choices_suffix,
            destinations=destinations,
            destinations_prefix=destinations_prefix,
            destinations_suffix=destinations_suffix,
            ttl=ttl,
            expiration_ttl=expiration_ttl,
            json=json,
            go=go,
            uid=uid,
            limited_signature=limited_signature,
        ).url

    def build_choose_request(
            self,
            *,
            choices: Sequence[str],
            tournament: str,
            choices_prefix: str | None = None,
            choices_suffix: str | None = None,
            destinations: Sequence[str] | None = None,
            destinations_prefix: str | None = None,
            destinations_suffix: str | None = None,
            ttl: int | None = None,
            expiration_ttl: int | None = None,
            json: bool | None = None,
            go: bool | None = None,
            uid: str | None = None,
            limited_signature: bool = False,
    ) -> ChooseRequest:
        _check_seconds("ttl", ttl)
        _check_seconds("expiration_ttl", expiration_ttl)
        if expiration_ttl is None:
            expiration_ttl = DEFAULT_EXPIRATION_TTL
        if ttl is not None and ttl > expiration_ttl:
            raise ConfigurationError(
                f"ttl must not exceed expiration horizon (ttl={ttl}, expiration_ttl={expiration_ttl})"
            )

        if len(choices) == 0:
            raise ValidationError("no choices supplied")
        if isinstance(choices, str):
            raise ValidationError("choices must be a sequence of strings, not a single string")
        if len(choices) > self._cfg.max_choices:
            raise ValidationError(f"the maximum number of choices is {self._cfg.max_choices}")

        if destinations is not None:
            if len(destinations) == 0:
                raise ValidationError("no destinations supplied")
            if isinstance(destinations, str):
                raise ValidationError("destinations must be a sequence of strings, not a single string")
            if len(destinations) > self._cfg.max_choices:
                raise ValidationError(f"the maximum number of destinations is {self._cfg.max_choices}")

        supplied: dict[str, FieldValue] = {
            "choices": [str(c) for c in choices],
            "choices_prefix": choices_prefix,
            "choices_suffix": choices_suffix,
            "destinations": [str(d) for d in destinations] if destinations is not None else None,
            "destinations_prefix": destinations_prefix,
            "destinations_suffix": destinations_suffix,
            "go": "true" if go else None,
            "json": "true" if json else None,
            "tournament": tournament,
            "ttl": str(ttl) if ttl is not None else None,
        }
        self._check_supported(supplied, limited_signature)

        supplied["expiration"] = str(math.ceil(self._clock()) + expiration_ttl)
        supplied["uid"] = uid if uid is not None else self._uid_factory()

        fields = self._assemble(supplied)
        scope = SignatureScope.LIMITED if limited_signature else SignatureScope.FULL
        signing_string = canonical_string(fields, protocol=self._protocol, scope=scope)
        signature = sign(self._cfg.secret_key, signing_string, algorithm=self._cfg.algorithm)

        url = self._build_url(fields, signature, limited_signature)
        log.debug(
            "signed choose request tournament=%s uid=%s scope=%s protocol=%s",
            tournament,
            fields["uid"],
            scope.value,
            self._protocol.name,
        )
        return ChooseRequest(
            fields=fields,
            signing_string=signing_string,
            signature=signature,
            scope=scope,
            url=url,
        )

    def _check_supported(self, supplied: dict[str, FieldValue], limited_signature: bool) -> None:
        known = self._protocol.params
        for name, value in supplied.items():
            if value is not None and name not in known:
                raise ValidationError(f"{name} is not supported by the {self._protocol.name} signing protocol")
        if limited_signature and not self._protocol.supports_limited:
            raise ValidationError(
                f"limited_signature is not supported by the {self._protocol.name} signing protocol"
            )

    def _assemble(self, supplied: dict[str, FieldValue]) -> dict[str, FieldValue]:
        fields: dict[str, FieldValue] = {}
        for f in self._protocol.fields:
            value = supplied.get(f.param)
            if value is not None and f.kind is FieldKind.SCALAR and not isinstance(value, str):
                value = ",".join(value)
            fields[f.name] = value
        return fields

    def _build_url(self, fields: dict[str, FieldValue], signature: str, limited_signature: bool) -> str:
        pairs: list[tuple[str, str]] = []
        for f in self._protocol.fields:
            value = fields.get(f.name)
            if value is None:
                continue
            if isinstance(value, str):
                pairs.append((f.query_key, value))
            else:
                pairs.extend((f.query_key, item) for item in value)
        if limited_signature:
            pairs.append(("limited_signature", "true"))
        pairs.append(("identity", self._cfg.identity))
        pairs.append(("signature", signature))

        query = urlencode(pairs, quote_via=quote)
        endpoint = self._cfg.endpoint.rstrip("/")
        return f"{endpoint}/{self._protocol.choose_path}?{query}"
