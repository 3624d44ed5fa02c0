"""
Compatibility checks between a stored (baseline) schema and a candidate.

The only policy is strict structural equality: same column names, same order,
same type tag per column. No type widening, no reordering tolerance.
"""
from typing import IO, Any, List, Mapping, Optional, Union

from schema_guard.core.inference import infer_schema
from schema_guard.core.serialization import load_schema
from schema_guard.models import Schema, SchemaDiff, TypeMismatch, Verdict, VerdictStatus


def diff_schemas(baseline: Schema, candidate: Schema) -> SchemaDiff:
    base_types = {c.name: c.dtype for c in baseline.columns}
    cand_types = {c.name: c.dtype for c in candidate.columns}

    missing = [name for name in baseline.names if name not in cand_types]
    extra = [name for name in candidate.names if name not in base_types]
    mismatches = {
        name: TypeMismatch(expected=base_types[name], actual=cand_types[name])
        for name in baseline.names
        if name in cand_types and base_types[name] != cand_types[name]
    }

    # relative order of the columns both schemas share
    shared_in_base = [name for name in baseline.names if name in cand_types]
    shared_in_cand = [name for name in candidate.names if name in base_types]

    return SchemaDiff(
        missing_columns=missing,
        extra_columns=extra,
        type_mismatches=mismatches,
        order_changed=shared_in_base != shared_in_cand,
    )


def _describe(diff: SchemaDiff) -> str:
    problems: List[str] = []
    if diff.missing_columns:
        problems.append(f"missing columns: {', '.join(diff.missing_columns)}")
    if diff.extra_columns:
        problems.append(f"unexpected columns: {', '.join(diff.extra_columns)}")
    for name, mismatch in diff.type_mismatches.items():
        problems.append(
            f"column '{name}' expected {mismatch.expected.value}, got {mismatch.actual.value}"
        )
    if diff.order_changed:
        problems.append("column order differs")
    return "; ".join(problems)


def compare(baseline: Schema, candidate: Schema) -> Verdict:
    """Strict comparison of two already inferred schemas."""
    diff = diff_schemas(baseline, candidate)
    if diff.is_empty:
        return Verdict(
            status=VerdictStatus.COMPATIBLE,
            reason="Dataset is valid according to the schema.",
            diff=diff,
        )
    return Verdict(
        status=VerdictStatus.INCOMPATIBLE,
        reason=f"Dataset is not valid according to the schema: {_describe(diff)}.",
        diff=diff,
    )


def compare_schemas(
    stored: Union[Schema, str, bytes, Mapping[str, Any]],
    candidate_handle: Union[IO[str], IO[bytes]],
    sample_rows: int = 1,
    delimiter: Optional[str] = None,
) -> Verdict:
    """
    Infers the candidate's schema from its handle and compares it with the stored one.

    The stored schema is parsed before the candidate is read, so a corrupted
    baseline fails with MalformedStoredSchemaError without touching the upload.
    Inference errors on the candidate propagate unchanged.
    """
    baseline = load_schema(stored)
    candidate = infer_schema(candidate_handle, sample_rows=sample_rows, delimiter=delimiter)
    return compare(baseline, candidate)
