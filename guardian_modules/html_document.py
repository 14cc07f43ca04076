"""
HTML tree helpers shared by the prevention modules
"""

from bs4 import BeautifulSoup, Doctype, Tag


PROTECTED_CLASS = "guardian-protected"

CONTENT_SELECTORS = (
    "article", "section", "main", "p",
    "div.content", "div.main", "div.article", "div.post",
)


def looks_like_html(content: str) -> bool:
    """Heuristic check that a body is an HTML document or fragment"""
    stripped = content.strip()
    if not stripped or stripped.startswith("<?xml"):
        return False
    lowered = stripped.lower()
    if "<body" in lowered or "<html" in lowered or "<!doctype html" in lowered:
        return True
    return "<" in stripped and "</" in stripped and "<?" not in stripped


def parse(content: str) -> BeautifulSoup:
    return BeautifulSoup(content, "html.parser")


def ensure_html(soup: BeautifulSoup) -> Tag:
    html = soup.find("html")
    if html is None:
        html = soup.new_tag("html")
        for child in list(soup.contents):
            if getattr(child, "name", None) is None and not str(child).strip():
                continue
            if isinstance(child, Doctype):
                continue
            html.append(child.extract())
        soup.append(html)
    return html


def ensure_head(soup: BeautifulSoup) -> Tag:
    head = soup.find("head")
    if head is None:
        head = soup.new_tag("head")
        ensure_html(soup).insert(0, head)
    return head


def ensure_body(soup: BeautifulSoup) -> Tag:
    body = soup.find("body")
    if body is None:
        html = ensure_html(soup)
        body = soup.new_tag("body")
        for child in list(html.contents):
            if getattr(child, "name", None) == "head":
                continue
            body.append(child.extract())
        html.append(body)
    return body


def add_class(tag: Tag, class_name: str = PROTECTED_CLASS):
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if class_name not in classes:
        classes = list(classes) + [class_name]
    tag["class"] = classes


def add_meta(soup: BeautifulSoup, name: str, content: str):
    head = ensure_head(soup)
    existing = head.find("meta", attrs={"name": name})
    if existing is not None:
        existing["content"] = content
        return
    head.append(soup.new_tag("meta", attrs={"name": name, "content": content}))


def mark_content_nodes(soup: BeautifulSoup):
    """Tag every main-content node with the protected class"""
    for selector in CONTENT_SELECTORS:
        for node in soup.select(selector):
            add_class(node)
