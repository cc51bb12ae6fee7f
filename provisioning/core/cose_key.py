"""
COSE_Key structured key object.

A thin, type-preserving wrapper around the decoded CBOR map of a COSE key
(RFC 8152 Section 7). Values keep the types produced by the CBOR decoder so
that strict field validation can tell integers from byte strings.
"""

from typing import Any, Dict, Iterator, Mapping, Optional, Union

import cbor2

from provisioning.core.errors import CborError, CborErrorReason
from provisioning.core.types import KeyLabel

# Labels holding private key material (d for OKP and EC2)
PRIVATE_LABELS = frozenset({int(KeyLabel.D)})


class CoseKey(Mapping):
    """
    Immutable COSE_Key.

    Behaves as a read-only mapping from integer labels to values. Labels may
    be given as KeyLabel members or plain integers.

    Example:
        >>> key = CoseKey({KeyLabel.KTY: 1, KeyLabel.CRV: 4, KeyLabel.X: b"..."})
        >>> key[KeyLabel.CRV]
        4
    """

    __slots__ = ("_params",)

    def __init__(self, params: Optional[Mapping[Any, Any]] = None):
        self._params: Dict[Any, Any] = {}
        for label, value in (params or {}).items():
            self._params[_normalize_label(label)] = _normalize_label(value)

    # ------------------------------------------------------------------
    # Mapping interface
    # ------------------------------------------------------------------

    def __getitem__(self, label):
        return self._params[_normalize_label(label)]

    def __iter__(self) -> Iterator:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __contains__(self, label) -> bool:
        return _normalize_label(label) in self._params

    def get(self, label, default=None):
        return self._params.get(_normalize_label(label), default)

    def __eq__(self, other) -> bool:
        if isinstance(other, CoseKey):
            return self._params == other._params
        return NotImplemented

    def __hash__(self):
        return hash(self.encode())

    def __repr__(self) -> str:
        shown = {}
        for label, value in self._params.items():
            if label in PRIVATE_LABELS:
                shown[label] = "<redacted>"
            elif isinstance(value, bytes):
                shown[label] = value.hex()
            else:
                shown[label] = value
        return f"CoseKey({shown})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def kty(self):
        return self.get(KeyLabel.KTY)

    @property
    def kid(self):
        return self.get(KeyLabel.KID)

    @property
    def alg(self):
        return self.get(KeyLabel.ALG)

    @property
    def crv(self):
        return self.get(KeyLabel.CRV)

    @property
    def x(self):
        return self.get(KeyLabel.X)

    @property
    def y(self):
        return self.get(KeyLabel.Y)

    def has_private(self) -> bool:
        return any(label in self._params for label in PRIVATE_LABELS)

    def public_key(self) -> "CoseKey":
        """Return a copy without private parameters."""
        return CoseKey(
            {label: value for label, value in self._params.items() if label not in PRIVATE_LABELS}
        )

    def to_dict(self) -> Dict[Any, Any]:
        return dict(self._params)

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    def encode(self) -> bytes:
        """Encode as a CBOR map."""
        return cbor2.dumps(self._params)

    @classmethod
    def decode(cls, data: Union[bytes, Mapping[Any, Any], "CoseKey"]) -> "CoseKey":
        """
        Decode a COSE key from CBOR bytes or an already decoded map.

        Raises:
            CborError: DESERIALIZATION_ERROR if data is not a CBOR map
        """
        if isinstance(data, CoseKey):
            return data
        if isinstance(data, (bytes, bytearray)):
            try:
                data = cbor2.loads(bytes(data))
            except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
                raise CborError("Failed to decode COSE key") from e
        if not isinstance(data, Mapping):
            raise CborError(
                "COSE key is not a CBOR map",
                CborErrorReason.DESERIALIZATION_ERROR,
                field="key",
                expected="map",
                actual=type(data).__name__,
            )
        return cls(data)


def _normalize_label(label):
    # IntEnum members compare like ints but keep their type; store plain ints
    if isinstance(label, int) and not isinstance(label, bool):
        return int(label)
    return label
