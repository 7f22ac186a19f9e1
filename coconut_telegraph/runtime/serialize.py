"""In-memory program documents: serialization, hashing and diffing."""

from __future__ import annotations

import difflib
import hashlib
import json

from .core import (
    Actuate,
    Cond,
    Halt,
    Log,
    Loop,
    MemoryThreshold,
    Move,
    Parallel,
    Sense,
    Turn,
    Wait,
    While,
)

DOCUMENT_VERSION = "1.0"


def predicate_to_dict(predicate):
    if isinstance(predicate, MemoryThreshold):
        return {
            "kind": "memory_threshold",
            "key": predicate.key,
            "threshold": predicate.threshold,
            "comparison": predicate.comparison,
        }
    return {"kind": "opaque"}


def instruction_to_dict(instr):
    """Convert one instruction (recursively) to a tagged dictionary."""

    if isinstance(instr, Move):
        return {"op": "move", "direction": instr.direction.value, "distance": instr.distance}
    if isinstance(instr, Turn):
        return {"op": "turn", "degrees": instr.degrees}
    if isinstance(instr, Sense):
        return {
            "op": "sense",
            "kind": instr.kind,
            "sensor_id": instr.sensor_id,
            "target": instr.target,
        }
    if isinstance(instr, Actuate):
        return {
            "op": "actuate",
            "kind": instr.kind,
            "actuator_id": instr.actuator_id,
            "value": instr.value,
        }
    if isinstance(instr, Cond):
        return {
            "op": "cond",
            "predicate": predicate_to_dict(instr.predicate),
            "then": [instruction_to_dict(i) for i in instr.then_branch],
            "else": [instruction_to_dict(i) for i in instr.else_branch],
        }
    if isinstance(instr, Loop):
        return {
            "op": "loop",
            "count": instr.count,
            "body": [instruction_to_dict(i) for i in instr.body],
        }
    if isinstance(instr, While):
        return {
            "op": "while",
            "predicate": predicate_to_dict(instr.predicate),
            "body": [instruction_to_dict(i) for i in instr.body],
        }
    if isinstance(instr, Parallel):
        return {
            "op": "parallel",
            "branches": [[instruction_to_dict(i) for i in b] for b in instr.branches],
        }
    if isinstance(instr, Wait):
        return {"op": "wait", "duration_ms": instr.duration_ms}
    if isinstance(instr, Log):
        return {"op": "log", "message": instr.message}
    if isinstance(instr, Halt):
        return {"op": "halt"}
    raise TypeError(f"Unknown instruction {instr!r}")


def program_to_dict(program, result=None):
    """Create a JSON-compatible document for a program and, optionally, a run."""

    doc = {
        "coconut_version": DOCUMENT_VERSION,
        "name": program.name,
        "instructions": [instruction_to_dict(i) for i in program.instructions],
    }
    if result is not None:
        doc["evaluation"] = {"steps": result.steps, "log": list(result.log)}
    return doc


def canonicalize_document(doc):
    """
    Normalize a document so semantically identical programs produce identical
    JSON strings regardless of key ordering.
    """

    def sort_dict(d):
        if isinstance(d, dict):
            return {k: sort_dict(v) for k, v in sorted(d.items())}
        elif isinstance(d, list):
            return [sort_dict(x) for x in d]
        else:
            return d

    return sort_dict(doc)


def hash_document(doc):
    """Compute the SHA-256 hash of an in-memory program document."""

    canon = canonicalize_document(doc)
    data = json.dumps(canon, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hash_program(program):
    """Hash the instruction tree only; the program name is not part of it."""

    doc = program_to_dict(program)
    doc.pop("name")
    return hash_document(doc)


def diff_programs(program_a, program_b):
    """Return unified-diff lines between two program listings."""

    return list(
        difflib.unified_diff(
            program_a.pretty().splitlines(),
            program_b.pretty().splitlines(),
            fromfile=program_a.name,
            tofile=program_b.name,
            lineterm="",
        )
    )


__all__ = [
    "DOCUMENT_VERSION",
    "canonicalize_document",
    "diff_programs",
    "hash_document",
    "hash_program",
    "instruction_to_dict",
    "predicate_to_dict",
    "program_to_dict",
]
