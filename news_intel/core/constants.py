"""Constants and the static source catalog."""
from enum import Enum
from typing import Dict, List

from news_intel.core.types import ContentSource

# Identity filter for category views
ALL_CATEGORIES = 'all'


class SortMode(str, Enum):
    DATE = 'date'
    PERSONAL_RELEVANCE = 'personalRelevance'
    GENERAL_RELEVANCE = 'generalRelevance'


# Categories with their subcategories, in display order
CATEGORIES_WITH_SUBCATEGORIES: Dict[str, List[str]] = {
    'Technology': [
        'AI & Machine Learning',
        'Cybersecurity',
        'Software Development',
        'Hardware & Gadgets',
        'Startups & Innovation',
        'Cloud & Infrastructure',
    ],
    'News': [
        'World News',
        'Local News',
        'Breaking News',
        'Investigative Journalism',
        'Human Interest',
        'Environment & Climate',
    ],
    'Brazilian News': [
        'National News',
        'Politics & Government',
        'Economy & Business',
        'Crime & Public Safety',
        'Culture & Entertainment',
        'Sports',
    ],
    'Politics': [
        'Domestic Policy',
        'International Relations',
        'Elections & Campaigns',
        'Legislation',
        'Geopolitics',
        'Political Analysis',
        'Foreign Affairs',
        'Brazilian Politics',
    ],
    'Finance': [
        'Stock Market',
        'Cryptocurrency',
        'Economics',
        'Personal Finance',
        'Corporate News',
        'Real Estate',
    ],
    'Science': [
        'Space & Astronomy',
        'Biology & Medicine',
        'Physics & Chemistry',
        'Research & Studies',
        'Climate Science',
        'Innovation & Discoveries',
    ],
}

CATEGORIES = list(CATEGORIES_WITH_SUBCATEGORIES)

# --- Source catalog ---
# category -> {source id: (name, feed url)}
_SOURCE_FEEDS = {
    'Technology': {
        'hacker-news': ('Hacker News', 'https://hnrss.org/frontpage'),
        'techcrunch': ('TechCrunch', 'https://techcrunch.com/feed/'),
        'the-verge': ('The Verge', 'https://www.theverge.com/rss/index.xml'),
        'ars-technica': ('Ars Technica', 'https://feeds.arstechnica.com/arstechnica/index'),
        'wired': ('Wired', 'https://www.wired.com/feed/rss'),
        'venturebeat-ai': ('VentureBeat AI', 'https://venturebeat.com/category/ai/feed/'),
        'github-blog': ('GitHub Blog', 'https://github.blog/feed/'),
        'olhar-digital': ('Olhar Digital', 'https://olhardigital.com.br/feed/'),
        'tecmundo': ('TecMundo', 'https://www.tecmundo.com.br/feed'),
    },
    'News': {
        'bbc-news': ('BBC News', 'http://feeds.bbci.co.uk/news/rss.xml'),
        'al-jazeera': ('Al Jazeera', 'https://www.aljazeera.com/xml/rss/all.xml'),
        'guardian': ('The Guardian', 'https://www.theguardian.com/world/rss'),
        'nyt': ('New York Times', 'https://rss.nytimes.com/services/xml/rss/nyt/World.xml'),
        'france24': ('France 24', 'https://www.france24.com/en/rss'),
        'dw': ('Deutsche Welle', 'https://rss.dw.com/xml/rss-en-all'),
        'npr': ('NPR News', 'https://feeds.npr.org/1001/rss.xml'),
    },
    'Brazilian News': {
        'g1': ('G1', 'https://g1.globo.com/rss/g1/'),
        'uol-noticias': ('UOL Notícias', 'https://rss.uol.com.br/feed/noticias.xml'),
        'folha': ('Folha de S.Paulo', 'https://www1.folha.uol.com.br/rss/emcimadahora.xml'),
        'estadao': ('Estadão', 'https://www.estadao.com.br/rss/ultimasnoticias.xml'),
        'veja': ('Veja', 'https://veja.abril.com.br/feed/'),
    },
    'Politics': {
        'politico': ('Politico', 'https://www.politico.com/rss/politics08.xml'),
        'the-hill': ('The Hill', 'https://thehill.com/feed/'),
        'foreign-policy': ('Foreign Policy', 'https://foreignpolicy.com/feed/'),
        'foreign-affairs': ('Foreign Affairs', 'https://www.foreignaffairs.com/rss.xml'),
        'poder360': ('Poder360', 'https://www.poder360.com.br/feed/'),
    },
    'Finance': {
        'yahoo-finance': ('Yahoo Finance', 'https://finance.yahoo.com/news/rssindex'),
        'coindesk': ('CoinDesk', 'https://www.coindesk.com/arc/outboundfeeds/rss/'),
        'bloomberg': ('Bloomberg', 'https://feeds.bloomberg.com/markets/news.rss'),
        'marketwatch': ('MarketWatch', 'http://feeds.marketwatch.com/marketwatch/topstories/'),
        'infomoney': ('InfoMoney', 'https://www.infomoney.com.br/feed/'),
    },
    'Science': {
        'mit-tech-review': ('MIT Technology Review', 'https://www.technologyreview.com/feed/'),
        'science-daily': ('ScienceDaily', 'https://www.sciencedaily.com/rss/all.xml'),
        'nature': ('Nature', 'https://www.nature.com/nature.rss'),
        'phys-org': ('Phys.org', 'https://phys.org/rss-feed/'),
        'space': ('Space.com', 'https://www.space.com/feeds/all'),
    },
}

CONTENT_SOURCES: List[ContentSource] = [
    ContentSource(id=source_id, name=name, url=url, category=category)
    for category, feeds in _SOURCE_FEEDS.items()
    for source_id, (name, url) in feeds.items()
]

# Used when a preferences file does not list any sources
DEFAULT_SOURCE_IDS = ['hacker-news', 'bbc-news', 'politico', 'yahoo-finance', 'science-daily']


def sources_by_ids(source_ids: List[str]) -> List[ContentSource]:
    """Return catalog entries for the given ids, in catalog order."""
    wanted = set(source_ids)
    return [source for source in CONTENT_SOURCES if source.id in wanted]
