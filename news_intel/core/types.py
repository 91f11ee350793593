"""Type definitions for sources, articles, analyses and cache records.

All types serialize to JSON-friendly dictionaries with camelCase keys, which is
the shape persisted by the cache substrate and returned by the analysis model.
"""
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")
    return dateutil_parser.isoparse(value)


@dataclass(frozen=True)
class ContentSource:
    id: str
    name: str
    url: str
    category: str
    subcategory: Optional[str] = None


@dataclass
class FactCheckFinding:
    claim: str
    verdict: str
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'claim': self.claim, 'verdict': self.verdict, 'source': self.source}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FactCheckFinding':
        return cls(
            claim=str(data['claim']),
            verdict=str(data['verdict']),
            source=data.get('source') or None,
        )


@dataclass
class FactCheck:
    summary: str
    findings: List[FactCheckFinding] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'summary': self.summary, 'findings': [f.to_dict() for f in self.findings]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FactCheck':
        return cls(
            summary=str(data['summary']),
            findings=[FactCheckFinding.from_dict(f) for f in data.get('findings') or []],
        )


@dataclass
class Perspective:
    viewpoint: str
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {'viewpoint': self.viewpoint, 'summary': self.summary}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Perspective':
        return cls(viewpoint=str(data['viewpoint']), summary=str(data['summary']))


@dataclass
class Analysis:
    """Result of the analysis collaborator for one article."""
    summary: str
    general_relevance: float
    personal_relevance: float
    fact_check: FactCheck
    perspectives: List[Perspective] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary,
            'generalRelevance': self.general_relevance,
            'personalRelevance': self.personal_relevance,
            'factCheck': self.fact_check.to_dict(),
            'perspectives': [p.to_dict() for p in self.perspectives],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Analysis':
        return cls(
            summary=str(data['summary']),
            general_relevance=float(data['generalRelevance']),
            personal_relevance=float(data.get('personalRelevance', 0)),
            fact_check=FactCheck.from_dict(data['factCheck']),
            perspectives=[Perspective.from_dict(p) for p in data.get('perspectives') or []],
        )


@dataclass
class Article:
    id: str
    title: str
    link: str
    source: str
    category: str
    content_snippet: str
    published_at: datetime
    analysis: Optional[Analysis] = None

    @property
    def dedup_key(self) -> str:
        """Identifying string used to collapse duplicates across sources."""
        return self.link or self.title

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'link': self.link,
            'source': self.source,
            'category': self.category,
            'contentSnippet': self.content_snippet,
            'publishedAt': self.published_at.isoformat(),
            'analysis': self.analysis.to_dict() if self.analysis else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        analysis = data.get('analysis')
        return cls(
            id=str(data['id']),
            title=str(data['title']),
            link=str(data.get('link') or ''),
            source=str(data['source']),
            category=str(data['category']),
            content_snippet=str(data.get('contentSnippet') or ''),
            published_at=_parse_timestamp(data['publishedAt']),
            analysis=Analysis.from_dict(analysis) if analysis else None,
        )


def make_article_id(link: str, title: str, source: str, category: str) -> str:
    """Canonical link, or a hash of title, source and category when there is no link."""
    if link:
        return link
    digest = hashlib.sha256(f"{title}|{source}|{category}".encode('utf-8')).hexdigest()
    return f"article-{digest[:16]}"


@dataclass
class CategoryWeight:
    category: str
    weight: int
    subcategories: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weight': self.weight,
            'subcategories': {name: {'weight': w} for name, w in self.subcategories.items()},
        }


@dataclass
class UserPreferences:
    category_weights: Dict[str, CategoryWeight] = field(default_factory=dict)
    sources: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)

    def weight_for(self, category: str) -> Optional[int]:
        entry = self.category_weights.get(category)
        return entry.weight if entry else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'categoryInterests': {name: cw.to_dict() for name, cw in self.category_weights.items()},
            'sources': list(self.sources),
            'keywords': list(self.keywords),
        }

    def fingerprint(self) -> str:
        """Stable short hash identifying this preferences combination."""
        payload = json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(payload.encode('utf-8')).hexdigest()[:12]


@dataclass
class CacheRecord:
    analyzed_articles: List[Article]
    all_fetched_articles: List[Article]
    fetched_at: datetime

    def payload(self) -> Dict[str, Any]:
        return {
            'analyzedArticles': [a.to_dict() for a in self.analyzed_articles],
            'allFetchedArticles': [a.to_dict() for a in self.all_fetched_articles],
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any], fetched_at: datetime) -> 'CacheRecord':
        return cls(
            analyzed_articles=[Article.from_dict(a) for a in data['analyzedArticles']],
            all_fetched_articles=[Article.from_dict(a) for a in data['allFetchedArticles']],
            fetched_at=fetched_at,
        )


@dataclass
class KeyDevelopment:
    summary: str
    source_title: str
    source_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {'summary': self.summary, 'sourceTitle': self.source_title, 'sourceUrl': self.source_url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeyDevelopment':
        return cls(
            summary=str(data['summary']),
            source_title=str(data['sourceTitle']),
            source_url=str(data['sourceUrl']),
        )


@dataclass
class Briefing:
    title: str
    executive_summary: str
    key_developments: List[KeyDevelopment]
    perspectives: List[Perspective]
    generated_at: datetime

    def payload(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'executiveSummary': self.executive_summary,
            'keyDevelopments': [k.to_dict() for k in self.key_developments],
            'perspectives': [p.to_dict() for p in self.perspectives],
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any], generated_at: datetime) -> 'Briefing':
        return cls(
            title=str(data['title']),
            executive_summary=str(data['executiveSummary']),
            key_developments=[KeyDevelopment.from_dict(k) for k in data.get('keyDevelopments') or []],
            perspectives=[Perspective.from_dict(p) for p in data.get('perspectives') or []],
            generated_at=generated_at,
        )
