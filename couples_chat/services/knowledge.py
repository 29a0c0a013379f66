"""Keyword retrieval over the knowledge base (no embeddings)."""
import logging
import re
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from couples_chat.core.errors import Lookup
from couples_chat.models.knowledge import KnowledgeEntry

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 3
PREVIEW_CHARS = 300
ENTRY_SEPARATOR = "\n\n---\n\n"
# Rows pulled from the store before in-process ranking, per requested entry
CANDIDATE_FACTOR = 10

_WORD_RE = re.compile(r"[^\W\d_]+")


def extract_keywords(query: str, max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """First distinct alphabetic tokens longer than two characters, lower-cased."""
    keywords: List[str] = []
    for token in _WORD_RE.findall((query or "").lower()):
        if len(token) > 2 and token not in keywords:
            keywords.append(token)
        if len(keywords) >= max_keywords:
            break
    return keywords


def _score(entry: KnowledgeEntry, keywords: List[str]) -> int:
    title = (entry.title or "").lower()
    body = (entry.content or "").lower()
    score = 0
    for keyword in keywords:
        if keyword in title:
            score += 2
        elif keyword in body:
            score += 1
    return score


def format_entry(entry: KnowledgeEntry) -> str:
    content = entry.content or ""
    preview = content[:PREVIEW_CHARS] + "..." if len(content) > PREVIEW_CHARS else content
    return f"**{entry.title}** ({entry.content_type}):\n{preview}"


def find_knowledge_entries(
    db: Session,
    query: str,
    language: str = "en",
    platform_id: Optional[str] = None,
    limit: int = 3,
) -> List[KnowledgeEntry]:
    """Return up to `limit` matching entries, best first. Raises on store errors."""
    keywords = extract_keywords(query)

    q = db.query(KnowledgeEntry).filter(
        or_(KnowledgeEntry.language == language, KnowledgeEntry.language.is_(None))
    )
    if keywords:
        conditions = []
        for term in keywords:
            conditions.append(KnowledgeEntry.title.ilike(f"%{term}%"))
            conditions.append(KnowledgeEntry.content.ilike(f"%{term}%"))
        q = q.filter(or_(*conditions))
    else:
        q = q.filter(KnowledgeEntry.content.ilike(f"%{query.strip()}%"))

    # Tenant rows plus global rows; only global rows without a tenant
    if platform_id:
        q = q.filter(or_(KnowledgeEntry.platform_id == platform_id, KnowledgeEntry.platform_id.is_(None)))
    else:
        q = q.filter(KnowledgeEntry.platform_id.is_(None))

    candidates = q.order_by(KnowledgeEntry.id.asc()).limit(limit * CANDIDATE_FACTOR).all()
    # sorted() is stable, so ties keep store order
    ranked = sorted(candidates, key=lambda e: _score(e, keywords), reverse=True)
    return ranked[:limit]


def search_knowledge_base(
    db: Session,
    query: str,
    language: str = "en",
    platform_id: Optional[str] = None,
    limit: int = 3,
) -> Lookup[str]:
    """
    Search the knowledge base and format the hits as prompt-ready context.

    Returns an empty string when nothing matches. Store errors never
    propagate; they come back as an empty value with `error` set.
    """
    try:
        entries = find_knowledge_entries(db, query, language, platform_id, limit)
    except Exception as e:
        logger.warning(f"Knowledge base search error: {e}")
        return Lookup("", error=str(e))

    if not entries:
        return Lookup("")

    logger.debug(f"Knowledge search matched {len(entries)} entries for query {query[:50]!r}")
    return Lookup(ENTRY_SEPARATOR.join(format_entry(e) for e in entries))
