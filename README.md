# tome

Render Wikipedia-style wikitext to HTML, offline. The package uses only the
standard library.

The renderer handles the structural parts of an article: paragraphs,
headings, bold and italic, lists, definition lists, tables, internal and
external links, preformatted blocks and `<nowiki>`. Templates and images
become styled placeholders. `<ref>` tags are gathered into a numbered
reference list at the end. If the parser gives up on the input, for example
because nesting is too deep, the renderer does not raise. It returns an error
banner followed by the raw wikitext in a `<pre>` block.

The package also has two small helpers for applications that embed the
rendered articles:

- `tome.navguard.is_internal_url` tells you whether a URL belongs to the
  app shell or is external.
- `tome.pmtiles` serves HTTP byte ranges from a local `.pmtiles` archive.
  It opens the file read-only and caps each response at 32 MiB.

## Installation

```
pip install .
```

## Rendering wikitext

```python
from tome.render import Renderer
from tome.link import NoopLinkResolver

renderer = Renderer(NoopLinkResolver())
html = renderer.render("'''Photon''' is a [[particle]].<ref>Source.</ref>")
```

A renderer needs a link resolver. The resolver says, for each internal link
target, whether the article is available, missing, or a redirect:

```python
from tome.link import LinkResolver, LinkStatus

class Store(LinkResolver):
    def __init__(self, titles, redirects):
        self.titles = titles
        self.redirects = redirects

    def resolve_internal(self, target):
        if target in self.redirects:
            return LinkStatus.redirect(self.redirects[target])
        if target in self.titles:
            return LinkStatus.available()
        return LinkStatus.missing()
```

`NoopLinkResolver` treats every link as missing. `AllAvailableResolver`
treats every link as available.

Internal links point at `#/article/<title>`. Spaces in the title become
underscores, and a few reserved characters are percent-encoded
(`tome.render.url_encode_title`). The renderer marks missing links with the
class `tome-missing`. A redirect link points at its resolved target.

Headings start at `<h2>` by default, because the page title is usually the
`<h1>`. Use `RenderOptions` to change the range:

```python
from tome.render import RenderOptions

renderer = Renderer(NoopLinkResolver()).with_options(
    RenderOptions(min_heading_level=3, max_heading_level=6)
)
```

## Parsing only

`tome.wikiparse.parse(wikitext)` returns the list of nodes. The renderer
walks this same list, so you can use it for your own processing. It raises
`tome.wikiparse.ParseError` when nesting is too deep.
`tome.render.collect_text(nodes)` flattens nodes to plain text.

## Navigation guard

```python
from tome.navguard import is_internal_url

is_internal_url("tauri://localhost/")                  # True
is_internal_url("http://localhost:1420/")              # True
is_internal_url("https://en.wikipedia.org/wiki/Photon")  # False
```

The guard accepts `about:`, `data:` and `blob:` URLs, the production shell
(`tauri://localhost`, `https://tauri.localhost`), the dev server and its
websocket on `localhost` or `127.0.0.1`, and the `tome-pmtiles` and `pmtiles`
schemes. Hosts must match exactly. It raises `ValueError` for a string that
is not an absolute URL.

## Serving pmtiles ranges

```python
from tome.pmtiles import parse_range, read_window, serve

parse_range("bytes=10-20", 100)   # (10, 20)
parse_range("bytes=-25", 100)     # (75, 99)
response = serve("world.pmtiles", "GET", "bytes=0-1023")
response.status                   # 206 when the file exists
```

`parse_range` raises `RangeError` when a range is malformed, has more than
one part, uses a unit other than `bytes`, or falls outside the file.
`read_window(path, start, length)` reads exactly that many bytes, or raises
`EOFError`. `serve` does not raise. It returns a `Response` with `status`,
`headers` and `body`, and turns every failure into a plain-text error
response. Examples: 404 when `path` is `None` or cannot be opened, 405 for
methods other than GET and HEAD, and 416 for bad or oversized ranges.

## What this package does not do

It does not fetch articles, store them, or index them for search. It does not
expand templates or download images. It has no desktop window or command-line
program. `serve` answers one request at a time as a function call; it is not
an HTTP server. `is_internal_url` only classifies URLs. It does not open
anything in a browser.

## Running the tests

```
pip install .[test]
pytest
```