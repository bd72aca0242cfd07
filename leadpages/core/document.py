"""
Contrôles structurels d'un PageDocument : ids uniques, profondeur, fieldName, types connus.
"""
from collections import Counter
from typing import Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel

from ..config import MAX_BLOCK_DEPTH
from .schemas import BlockConfig, FormFlow, FormStep, PageDocument


class ConfigIssue(BaseModel):
    """Problème de configuration détecté dans un document."""
    code: str       # duplicate_id | depth_exceeded | duplicate_field | unknown_type | no_steps
    message: str
    block_id: Optional[str] = None


# ── Parcours ────────────────────────────────────────────────────────────────

def walk_blocks(blocks: Iterable[BlockConfig], start_depth: int = 1) -> Iterator[Tuple[BlockConfig, int]]:
    """
    Parcours en profondeur (ordre document) → (bloc, profondeur).
    Itératif : un arbre pathologique ne fait pas exploser la pile.
    """
    stack = [(b, start_depth) for b in reversed(list(blocks))]
    while stack:
        block, depth = stack.pop()
        yield block, depth
        for child in reversed(block.children or []):
            stack.append((child, depth + 1))


def iter_document_blocks(document: PageDocument) -> Iterator[Tuple[BlockConfig, int]]:
    """Tous les blocs du document : sections puis étapes du formulaire."""
    for section in document.sections:
        yield from walk_blocks(section.blocks)
    for step in document.form_flow.steps:
        yield from walk_blocks(step.blocks)


def resolve_field_name(block: BlockConfig, registry=None) -> Optional[str]:
    """fieldName du bloc ; avec un registry, le défaut du type s'applique si absent."""
    if registry is not None:
        return registry.field_name_of(block)
    return block.field_name


def field_blocks(blocks: Iterable[BlockConfig], registry=None) -> List[BlockConfig]:
    """Blocs (imbriqués compris) déclarant un fieldName."""
    return [b for b, _ in walk_blocks(blocks) if resolve_field_name(b, registry)]


def step_field_blocks(step: FormStep, registry=None) -> List[BlockConfig]:
    return field_blocks(step.blocks, registry)


def flow_field_blocks(flow: FormFlow, registry=None) -> List[BlockConfig]:
    return [b for step in flow.steps for b in step_field_blocks(step, registry)]


def find_block(document: PageDocument, block_id: str) -> Optional[BlockConfig]:
    for block, _ in iter_document_blocks(document):
        if block.id == block_id:
            return block
    return None


# ── Validation ──────────────────────────────────────────────────────────────

def duplicate_field_names(flow: FormFlow, registry=None) -> List[str]:
    counts = Counter(resolve_field_name(b, registry) for b in flow_field_blocks(flow, registry))
    return sorted(name for name, n in counts.items() if n > 1)


def validate_document(
    document: PageDocument,
    registry=None,
    max_depth: int = MAX_BLOCK_DEPTH,
    require_steps: bool = False,
) -> List[ConfigIssue]:
    """
    Retourne la liste des problèmes de configuration (vide = document valide).

    - duplicate_id    : même id de bloc deux fois dans le document
    - depth_exceeded  : bloc imbriqué au-delà de max_depth
    - duplicate_field : fieldName partagé par deux blocs du formulaire
    - unknown_type    : type absent du registry (si registry fourni)
    - no_steps        : formulaire sans étape (si require_steps)
    """
    issues: List[ConfigIssue] = []
    ids: Counter = Counter()

    for block, depth in iter_document_blocks(document):
        ids[block.id] += 1
        if depth == max_depth + 1:
            issues.append(ConfigIssue(
                code="depth_exceeded",
                message=f"Block {block.id!r} is nested deeper than {max_depth} levels",
                block_id=block.id,
            ))
        if registry is not None and not registry.has(block.type):
            issues.append(ConfigIssue(
                code="unknown_type",
                message=f"Unknown block type: {block.type}",
                block_id=block.id,
            ))

    for block_id, n in ids.items():
        if n > 1:
            issues.append(ConfigIssue(
                code="duplicate_id",
                message=f"Block id {block_id!r} is used {n} times",
                block_id=block_id,
            ))

    for name in duplicate_field_names(document.form_flow, registry):
        issues.append(ConfigIssue(
            code="duplicate_field",
            message=f"Field name {name!r} is declared by more than one block",
        ))

    if require_steps and not document.form_flow.steps:
        issues.append(ConfigIssue(code="no_steps", message="Form flow has no steps"))

    return issues
