"""
HTML templates for the generated site.

Each template takes page data and returns HTML. Site links in page data are
site-absolute ("/p/launch/index.html") and are prefixed with the page's
relative root, so pages work from any output directory.
"""

from __future__ import annotations

import html
from typing import Callable, Dict, List, Mapping

from page_data import ArticleListPage, ArticlePage, ArticlePreview, Homepage, SiteData, TopicListPage
from site_paths import Pagination


MAIN_CSS = """\
/* layout */
:root {
  --cm-body-bg: #fcfcfc;
  --cm-text: #222;
  --cm-muted: #6c757d;
  --cm-border: #e5e5e5;
}
body {
  overflow-y: scroll;
  background: var(--cm-body-bg);
  color: var(--cm-text);
  font-size: 1.0625rem;
}
.site-header {
  border-bottom: 1px solid var(--cm-border);
  background: #fafafa;
  padding: 1rem 2rem;
}
.site-header .nav-link { color: var(--cm-text); padding: .2rem .6rem; }
.site-header .nav-link:hover { background: #eef2f6; border-radius: .25rem; }
.content {
  padding: 3rem 4rem;
  max-width: 980px;
  font-family: Georgia, Cambria, "Times New Roman", Times, serif;
  line-height: 1.7;
  letter-spacing: .2px;
  background: white;
  box-shadow: 0 1px 2px rgba(0,0,0,.03);
  border: 1px solid var(--cm-border);
  border-radius: 8px;
  margin: 2.5rem auto 5rem auto;
}
.content img, .content video { max-width: 100%; height: auto; }
.content h1, .content h2, .content h3, .content h4 { margin-top: 2rem; font-weight: 600; }
.content p { margin-bottom: 1.1rem; }
.content pre {
  background: #f7f7f7;
  border: 1px solid var(--cm-border);
  border-radius: 6px;
  padding: .75rem 1rem;
}
.content hr { border-top: 1px solid var(--cm-border); margin: 1.5rem 0; }
a { text-decoration: none; }
a:hover { text-decoration: underline; }
.preview {
  border: 1px dashed var(--cm-border);
  background: #fafafa;
  border-radius: 6px;
  padding: .5rem .75rem;
  margin-bottom: 1rem;
}
.preview .meta, .site-footer { color: var(--cm-muted); font-size: .85rem; }
.topics .badge { font-weight: 500; }
"""


def _e(text: str) -> str:
    return html.escape(text)


def _href(site: SiteData, url: str) -> str:
    return _e(site.rel_path + url)


def _render_header(site: SiteData) -> str:
    links = "".join(
        f'<li class="nav-item"><a class="nav-link" href="{_href(site, link.url)}">{_e(link.label)}</a></li>'
        for link in site.headers
    )
    return (
        f'<header class="site-header d-flex align-items-center justify-content-between">'
        f'<a class="fw-semibold" href="{_href(site, "/index.html")}">{_e(site.title)}</a>'
        f'<ul class="nav">{links}</ul>'
        f"</header>"
    )


def _render_layout(site: SiteData, page_title: str, body_html: str) -> str:
    title_text = _e(f"{page_title} · {site.title}" if page_title != site.title else site.title)
    owner = f" by {_e(site.owner)}" if site.owner else ""
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title_text}</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css" rel="stylesheet" integrity="sha384-QWTKZyjpPEjISv5WaRU9OFeRpok6YctnYmDr5pNlyT2bRjXh0JMhjY6hW+ALEwIH" crossorigin="anonymous">
    <link href="{_e(site.rel_path)}/css/main.css" rel="stylesheet">
  </head>
  <body>
    {_render_header(site)}
    <main class="content">
      {body_html}
    </main>
    <footer class="site-footer text-center mb-4">{_e(site.title)}{owner} · generated {_e(site.generated_at)}</footer>
  </body>
</html>
"""


def _render_pagination(site: SiteData, pagination: Pagination) -> str:
    if not pagination.visible:
        return ""
    groups: List[str] = []
    for segment in pagination.segments:
        items = "".join(
            f'<li class="page-item{" active" if link.selected else ""}">'
            f'<a class="page-link" href="{_href(site, link.url)}">{_e(link.label)}</a></li>'
            for link in segment
        )
        groups.append(items)
    separator = '<li class="page-item disabled"><span class="page-link">…</span></li>'
    return f'<nav><ul class="pagination">{separator.join(groups)}</ul></nav>'


def render_article_preview(preview: ArticlePreview) -> str:
    href = _e(preview.rel_path + preview.url)
    return (
        f'<div class="preview">'
        f'<a class="fw-semibold" href="{href}">{_e(preview.prefix)}{_e(preview.title)}</a>'
        f'<div class="meta">{_e(preview.published)}</div>'
        f"<div>{preview.preview_html}</div>"
        f"</div>"
    )


def render_article(page: ArticlePage) -> str:
    site = page.site
    crumbs = "".join(
        f'<li class="breadcrumb-item"><a href="{_href(site, link.url)}">{_e(link.label)}</a></li>'
        for link in page.breadcrumbs
    )
    topics = "".join(
        f'<a class="badge text-bg-light me-1" href="{_href(site, link.url)}">{_e(link.label)}</a>'
        for link in page.topics
    )
    fragments = "".join(f"<section>{fragment.html}</section>" for fragment in page.content)
    body = (
        f'<nav><ol class="breadcrumb">{crumbs}</ol></nav>'
        f'<h1 class="h3">{_e(page.title)}</h1>'
        f'<div class="preview meta">{_e(page.published)}</div>'
        f'<div class="topics mb-3">{topics}</div>'
        f"<hr />{fragments}"
    )
    return _render_layout(site, page.title, body)


def render_article_list(page: ArticleListPage) -> str:
    previews = "".join(render_article_preview(p) for p in page.articles)
    pagination = _render_pagination(page.site, page.pagination)
    body = f'<h1 class="h3">{_e(page.title)}</h1><hr />{previews}{pagination}'
    return _render_layout(page.site, page.title, body)


def render_topic_list(page: TopicListPage) -> str:
    site = page.site
    topics = "".join(f'<li><a href="{_href(site, link.url)}">{_e(link.label)}</a></li>' for link in page.topics)
    pagination = _render_pagination(site, page.pagination)
    body = f'<h1 class="h3">{_e(page.title)}</h1><hr /><ul>{topics}</ul>{pagination}'
    return _render_layout(site, page.title, body)


def render_homepage(page: Homepage) -> str:
    site = page.site
    previews = "".join(render_article_preview(p) for p in page.articles)
    body = (
        f'<h1 class="h3">{_e(site.title)}</h1><hr />{previews}'
        f'<a class="btn btn-outline-primary" href="{_href(site, page.articles_url)}">All articles</a>'
    )
    return _render_layout(site, site.title, body)


def render_image(data: Mapping[str, str]) -> str:
    title = data.get("title") or ""
    caption = f"<figcaption>{_e(title)}</figcaption>" if title else ""
    return f'<figure><img src="{_e(data["address"])}" alt="{_e(title)}" />{caption}</figure>'


def render_video(data: Mapping[str, str]) -> str:
    return f'<video controls src="{_e(data["address"])}" title="{_e(data.get("title") or "")}"></video>'


def render_youtube(data: Mapping[str, str]) -> str:
    return (
        f'<div class="ratio ratio-16x9"><iframe src="https://www.youtube.com/embed/{_e(data["id"])}" '
        f'title="{_e(data.get("title") or "YouTube video")}" allowfullscreen></iframe></div>'
    )


TEMPLATES: Dict[str, Callable] = {
    "homepage": render_homepage,
    "article": render_article,
    "article-list": render_article_list,
    "topic-list": render_topic_list,
    "article-preview": render_article_preview,
    "content-fragment-image": render_image,
    "content-fragment-video": render_video,
    "content-fragment-youtube": render_youtube,
}


def render(template: str, data) -> str:
    try:
        fn = TEMPLATES[template]
    except KeyError:
        raise KeyError(f"Unknown template: {template}") from None
    return fn(data)
