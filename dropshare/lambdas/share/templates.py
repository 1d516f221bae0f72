"""HTML rendering for the share page.

Filenames come from uploading clients and are untrusted: everything interpolated
into markup goes through html.escape(), and only http(s) URLs are linked.
"""

from html import escape

from dropshare.models import SharedFileModel
from dropshare.services import ResolvedShare
from dropshare.services.validation import is_absolute_url
from dropshare.utils.helpers import download_url


PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
<main>
{content}
</main>
</body>
</html>
"""


def expiry_notice(minutes_remaining: int) -> str:
    """Human readable expiry line with a singular/plural minute.

    >>> expiry_notice(1)
    'These files will expire in 1 minute'
    >>> expiry_notice(9)
    'These files will expire in 9 minutes'
    """
    suffix = '' if minutes_remaining == 1 else 's'
    return f'These files will expire in {minutes_remaining} minute{suffix}'


def render_file_item(file: SharedFileModel) -> str:
    name = escape(file.filename)
    if not is_absolute_url(file.url):
        # Only http(s) targets become links
        return f'<li><span class="filename">{name}</span> <span class="unavailable">Unavailable</span></li>'
    href = escape(download_url(file.url, file.filename))
    return f'<li><span class="filename">{name}</span> <a href="{href}" download="{name}" rel="noopener noreferrer">Download</a></li>'


def render_share_page(share: ResolvedShare) -> str:
    items = '\n'.join(render_file_item(f) for f in share.files)
    content = f'<h1>Shared Files</h1>\n<p>{escape(expiry_notice(share.minutes_remaining))}</p>\n<ul>\n{items}\n</ul>'
    return PAGE.format(title='Shared Files', content=content)


def render_not_found_page() -> str:
    content = '<h1>404</h1>\n<p>This share does not exist or has expired.</p>'
    return PAGE.format(title='Share not found', content=content)
