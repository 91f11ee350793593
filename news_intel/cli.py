"""
News Intel Command Line Interface.

Loads a personalized, AI-analyzed news feed for one user and prints it,
pages through it, extends it and builds the daily briefing.

Example Usage:
    # Show the first page of the feed (served from cache while fresh)
    news-intel --prefs prefs.json feed

    # Force a refresh and sort by personal relevance
    news-intel --prefs prefs.json feed --refresh --sort personalRelevance

    # Analyze the next batch of fetched articles
    news-intel --prefs prefs.json load-more --count 5

Environment Variables:
    OPENAI_API_KEY: API key for OpenAI
    NEWS_INTEL_CACHE_DIR: Directory for cached feeds and briefings
    NEWS_INTEL_PROXY_BASE: Relay endpoint for feed retrieval (empty fetches directly)

For configuration options, see config/settings.py
"""
import json
import textwrap
from pathlib import Path

import click
from dotenv import load_dotenv

from news_intel.cache.store import FileStore
from news_intel.config.settings import CACHE_SETTINGS
from news_intel.core.constants import CATEGORIES, CONTENT_SOURCES, DEFAULT_SOURCE_IDS, SortMode
from news_intel.core.errors import NewsIntelError
from news_intel.llm.analyzer import OpenAIAnalyzer
from news_intel.llm.briefing import BriefingGenerator
from news_intel.logging_cfg.logger import print_metrics_summary, reset_metrics, setup_logger
from news_intel.session.feed_session import FeedSession

load_dotenv()

logger = setup_logger()

DEFAULT_WEIGHT = 3


def default_preferences() -> dict:
    """Equal interest in every category over the default sources."""
    return {
        'categoryInterests': {category: {'weight': DEFAULT_WEIGHT} for category in CATEGORIES},
        'sources': list(DEFAULT_SOURCE_IDS),
        'keywords': [],
    }


def read_preferences(path) -> dict:
    if path is None:
        return default_preferences()
    try:
        raw = json.loads(Path(path).read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise click.BadParameter(f"cannot read preferences: {e}", param_hint='--prefs')
    if isinstance(raw, dict) and 'sources' not in raw:
        raw['sources'] = list(DEFAULT_SOURCE_IDS)
    return raw


def format_article(article) -> str:
    lines = [f"[{article.category}] {article.title}"]
    meta = f"  {article.source} | {article.published_at.strftime('%Y-%m-%d %H:%M')}"
    if article.analysis:
        meta += (f" | general {article.analysis.general_relevance:g}/10"
                 f" | personal {article.analysis.personal_relevance:g}/10")
        lines.append(meta)
        lines.append(textwrap.fill(article.analysis.summary, width=88,
                                   initial_indent='  ', subsequent_indent='  '))
    else:
        lines.append(meta)
    if article.link:
        lines.append(f"  {article.link}")
    lines.append(f"  id: {article.id}")
    return "\n".join(lines)


def open_session(ctx) -> FeedSession:
    obj = ctx.obj
    return FeedSession(
        user_id=obj['user'],
        preferences=read_preferences(obj['prefs']),
        analyzer=OpenAIAnalyzer(),
        store=FileStore(obj['cache_dir']),
    )


@click.group()
@click.option('--prefs', type=click.Path(dir_okay=False), default=None,
              help='Preferences JSON (categoryInterests, sources, keywords).')
@click.option('--user', default='local', show_default=True, help='User id the cache is keyed by.')
@click.option('--cache-dir', default=None, help='Cache directory (defaults to NEWS_INTEL_CACHE_DIR).')
@click.pass_context
def cli(ctx, prefs, user, cache_dir):
    """Personalized news feed with AI analysis."""
    ctx.ensure_object(dict)
    ctx.obj.update(prefs=prefs, user=user, cache_dir=cache_dir or CACHE_SETTINGS['cache_dir'])


@cli.command()
@click.option('--category', default=None, type=click.Choice(CATEGORIES), help='Only list this category.')
@click.pass_context
def sources(ctx, category):
    """List the source catalog; selected sources are marked with *."""
    selected = set(read_preferences(ctx.obj['prefs']).get('sources') or [])
    for source in CONTENT_SOURCES:
        if category and source.category != category:
            continue
        marker = '*' if source.id in selected else ' '
        click.echo(f"{marker} {source.id:<24} {source.category:<16} {source.name}")


@cli.command()
@click.option('--refresh', is_flag=True, help='Ignore the cache and refetch every source.')
@click.option('--category', default='all', show_default=True, help='Only show this category.')
@click.option('--sort', 'sort_mode', type=click.Choice([m.value for m in SortMode]),
              default=SortMode.DATE.value, show_default=True)
@click.option('--page', default=1, show_default=True, type=click.IntRange(min=1))
@click.option('--metrics', is_flag=True, help='Print pipeline metrics afterwards.')
@click.pass_context
def feed(ctx, refresh, category, sort_mode, page, metrics):
    """Show one page of the analyzed feed."""
    reset_metrics()
    try:
        session = open_session(ctx)
        session.load(force=refresh)
    except NewsIntelError as e:
        logger.error(f"Feed load failed: {e}")
        raise click.ClickException(str(e))

    session.set_filter(category)
    session.set_sort(sort_mode)
    session.set_page(page)
    articles = session.view()

    if not articles:
        click.echo("No articles to show.")
    for article in articles:
        click.echo(format_article(article))
        click.echo()
    click.echo(f"Page {session.page}/{session.page_count()} | "
               f"{len(session.analyzed)} analyzed of {len(session.fetched)} fetched")
    if metrics:
        click.echo(print_metrics_summary())


@cli.command('load-more')
@click.option('--count', default=None, type=click.IntRange(min=1), help='Articles to analyze.')
@click.pass_context
def load_more(ctx, count):
    """Analyze the next batch of already-fetched articles."""
    try:
        session = open_session(ctx)
        session.load()
        added = session.load_more(count)
    except NewsIntelError as e:
        logger.error(f"Load more failed: {e}")
        raise click.ClickException(str(e))

    if added:
        click.echo(f"Added {added} analyzed articles ({len(session.analyzed)}/{len(session.fetched)}).")
    else:
        click.echo("Nothing to load.")


@cli.command()
@click.argument('article_id')
@click.pass_context
def analyze(ctx, article_id):
    """Re-run the analysis for one article."""
    try:
        session = open_session(ctx)
        session.load()
        article = session.reanalyze(article_id)
    except KeyError:
        raise click.ClickException(f"Unknown article id: {article_id}")
    except NewsIntelError as e:
        logger.error(f"Analysis failed: {e}")
        raise click.ClickException(str(e))
    click.echo(format_article(article))


@cli.command()
@click.option('--force', is_flag=True, help='Regenerate even if a cached briefing is fresh.')
@click.pass_context
def briefing(ctx, force):
    """Print the daily briefing built from the most relevant articles."""
    try:
        session = open_session(ctx)
        session.load()
        result = session.daily_briefing(BriefingGenerator(), force=force)
    except NewsIntelError as e:
        logger.error(f"Briefing failed: {e}")
        raise click.ClickException(str(e))

    click.echo(result.title)
    click.echo("=" * len(result.title))
    click.echo(textwrap.fill(result.executive_summary, width=88))
    click.echo("\nKey developments:")
    for item in result.key_developments:
        click.echo(f"- {item.summary} ({item.source_title})")
    if result.perspectives:
        click.echo("\nPerspectives:")
        for item in result.perspectives:
            click.echo(f"- {item.viewpoint}: {item.summary}")


if __name__ == "__main__":
    cli()
