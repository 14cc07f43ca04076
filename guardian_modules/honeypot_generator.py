"""
Honeypot Generator

Builds decoy pages full of bait links for suspected crawlers. Anyone who
follows a bait link or loads the tracking pixel identifies itself by the
page token.
"""

import random
import string
from typing import Dict, List, Optional

from models import RequestContext


BAIT_PREFIXES = ("/internal/document/", "/private/content/", "/member/access/", "/restricted/data/")
FOOTER_PATHS = ("/about", "/privacy", "/terms", "/contact")

TEMPLATES: Dict[str, Dict[str, str]] = {
    "product": {
        "title": "Product Information - NOT FOR DISTRIBUTION",
        "description": "This product information is confidential and not for distribution.",
        "header": "Product Details",
    },
    "article": {
        "title": "Article Preview - CONFIDENTIAL",
        "description": "Preview version of this article, not for public distribution.",
        "header": "Article Preview",
    },
    "category": {
        "title": "Category Listing - INTERNAL USE ONLY",
        "description": "Internal category structure, not for public access.",
        "header": "Category Overview",
    },
    "generic": {
        "title": "Internal Page - RESTRICTED ACCESS",
        "description": "This content requires authentication to access.",
        "header": "Restricted Content",
    },
}

PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<meta name="robots" content="noindex, nofollow">
<meta name="guardian-protected" content="true">
<title>{title}</title>
<meta name="description" content="{description}">
<style>
body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 1200px; margin: 0 auto; padding: 20px; }}
main {{ display: flex; }}
article {{ flex: 3; }}
aside {{ flex: 1; padding-left: 30px; }}
footer {{ margin-top: 50px; border-top: 1px solid #eee; padding-top: 20px; }}
</style>
</head>
<body>
<header>
<h1>{header}</h1>
<nav>{navigation}</nav>
</header>
<main>
<article>
{content}
</article>
<aside>
{sidebar}
</aside>
</main>
<footer>
{footer}
</footer>
{tracking}
</body>
</html>
"""


def link_label(path: str) -> str:
    """'/member/access/AbC' -> 'Member Access AbC'"""
    words = path.replace("-", " ").replace("_", " ").replace("/", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def make_token(rng: random.Random) -> str:
    return f"guardian_{rng.getrandbits(64):016x}"


class HoneypotGenerator:
    """Decoy page builder"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, ctx: RequestContext, token: Optional[str] = None) -> str:
        """Decoy page for ctx; pass token to share it with response headers"""
        token = token or make_token(self.rng)
        template = self.select_template(ctx.trimmed_path)
        paths = self.bait_paths()
        labels = TEMPLATES[template]

        return PAGE.format(
            title=labels["title"],
            description=labels["description"],
            header=labels["header"],
            navigation=self._navigation(paths),
            sidebar=self._sidebar(paths),
            footer=self._footer(),
            content=self._content(template),
            tracking=self._tracking(token),
        )

    @staticmethod
    def select_template(path: str) -> str:
        if "product" in path:
            return "product"
        if "article" in path or "post" in path or "blog" in path:
            return "article"
        if "category" in path or "tag" in path:
            return "category"
        return "generic"

    def random_string(self, length: int) -> str:
        return "".join(self.rng.choice(string.ascii_letters + string.digits) for _ in range(length))

    def bait_paths(self) -> List[str]:
        return [prefix + self.random_string(8) for prefix in BAIT_PREFIXES]

    def _navigation(self, paths: List[str]) -> str:
        items = "".join(f'<li><a href="{path}">{link_label(path)}</a></li>' for path in paths)
        return f"<ul>{items}</ul>"

    def _sidebar(self, paths: List[str]) -> str:
        links = "".join(
            f'<p><a href="{path}">Access {link_label(path)}</a></p>' for path in reversed(paths)
        )
        return f"<h3>Resources</h3>{links}"

    def _footer(self) -> str:
        links = " | ".join(f'<a href="{path}">{link_label(path)}</a>' for path in FOOTER_PATHS)
        return f"<p>{links}</p>"

    def _tracking(self, token: str) -> str:
        return (
            '<div style="display:none;">'
            f'<img src="/guardian-track/{token}.png" alt="">'
            f'<input type="hidden" name="guardian_token" value="{token}">'
            f'<meta name="guardian-honeypot" content="{token}">'
            "</div>"
        )

    def _content(self, template: str) -> str:
        if template == "product":
            return self._product_content()
        if template == "article":
            return self._article_content()
        if template == "category":
            return self._category_content()
        return self._generic_content()

    def _product_content(self) -> str:
        return f"""<div class="product-info">
<h2>[DRAFT] Product XYZ-{self.rng.randint(1000, 9999)}</h2>
<p><strong>NOTICE:</strong> This product information is confidential and intended for internal use only.</p>
<div class="product-details">
<p>All specifications and details are currently under NDA and cannot be disclosed publicly.</p>
<h3>Specifications</h3>
<ul>
<li>Dimension: REDACTED</li>
<li>Weight: REDACTED</li>
<li>Power: REDACTED</li>
<li>Connectivity: REDACTED</li>
</ul>
<h3>Pricing</h3>
<p>All pricing information is confidential. Please <a href="/login">login</a> to view pricing details.</p>
</div>
</div>"""

    def _article_content(self) -> str:
        headline = " ".join(self.random_string(n).capitalize() for n in (5, 4, 6))
        return f"""<div class="preview-article">
<h2>[CONFIDENTIAL DRAFT] {headline}</h2>
<p class="disclaimer">This article is a draft and not for public distribution. The information contained herein is subject to change.</p>
<div class="article-body">
<p>Lorem ipsum dolor sit amet, consectetur adipiscing elit. [CONTENT REDACTED FOR PREVIEW]</p>
<p>Ut enim ad minim veniam, quis nostrud exercitation ullamco laboris. [CONTENT REDACTED FOR PREVIEW]</p>
<blockquote><p>"This quote is pending approval from the source and may not be used." - REDACTED</p></blockquote>
<p>To view the full article, please <a href="/login">sign in</a> or <a href="/register">register for an account</a>.</p>
</div>
</div>"""

    def _category_content(self) -> str:
        categories = []
        for _ in range(12):
            name = self.random_string(self.rng.randint(5, 10)).capitalize()
            categories.append(f'<li><a href="/category/{name}">{name} ({self.rng.randint(10, 100)})</a></li>')

        return f"""<div class="category-listing">
<h2>Category Overview [INTERNAL USE ONLY]</h2>
<p class="disclaimer">This listing shows the internal structure of our content categories.</p>
<h3>Main Categories</h3>
<ul>{"".join(categories[:6])}</ul>
<h3>Subcategories</h3>
<ul>{"".join(categories[6:])}</ul>
<p>For detailed category reports, please <a href="/login">log in to the system</a>.</p>
</div>"""

    def _generic_content(self) -> str:
        return """<div class="restricted-content">
<h2>Restricted Content</h2>
<p class="access-denied">Access to this content is restricted to authorized users only.</p>
<p>To request access, please contact your system administrator or <a href="/login">log in with your credentials</a>.</p>
<form class="mock-form">
<label for="username">Username:</label> <input type="text" id="username" name="username">
<label for="password">Password:</label> <input type="password" id="password" name="password">
<button type="submit">Log In</button>
</form>
</div>"""
