"""Grouping of flat secret records into per-name bundles."""

from collections.abc import Iterable

from .models import SecretBundle, SecretRecord


def group_secrets(records: Iterable[SecretRecord]) -> SecretBundle:
    """Group records by secret name.

    Names keep the order of their first occurrence. A repeated key under the
    same name overwrites the earlier value.
    """
    bundle: SecretBundle = {}
    for record in records:
        bundle.setdefault(record.name, {})[record.key] = record.value
    return bundle
