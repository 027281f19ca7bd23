"""
Post content sanitizing and display escaping.
"""

from fancms.core.sanitize import escape_html, sanitize_content


def test_allowed_markup_is_kept():
    html = '<p>Hello <strong>world</strong></p>'
    assert sanitize_content(html) == html


def test_script_is_dropped_with_its_body():
    assert sanitize_content('<p>Hi</p><script>alert("x")</script>') == '<p>Hi</p>'


def test_unknown_tag_keeps_text():
    assert sanitize_content('<marquee>wow</marquee>') == 'wow'


def test_event_handlers_are_stripped():
    assert sanitize_content('<p onclick="steal()">x</p>') == '<p>x</p>'


def test_javascript_links_lose_href():
    assert sanitize_content('<a href="javascript:alert(1)">x</a>') == '<a>x</a>'


def test_safe_links_and_images():
    assert sanitize_content('<a href="https://example.com" title="t">x</a>') == \
        '<a href="https://example.com" title="t">x</a>'
    assert sanitize_content('<img src="/images/a.jpg" alt="A">') == '<img src="/images/a.jpg" alt="A">'


def test_unclosed_tags_are_closed():
    assert sanitize_content('<ul><li>one') == '<ul><li>one</li></ul>'


def test_empty_input():
    assert sanitize_content('') == ''


def test_escape_html():
    assert escape_html('<a href="/x">\'&\'</a>') == \
        '&lt;a href=&quot;&#x2F;x&quot;&gt;&#x27;&amp;&#x27;&lt;&#x2F;a&gt;'


def test_data_urls_only_for_images():
    image = sanitize_content('<img src="data:image/png;base64,AAAA" alt="dot">')
    assert 'src="data:image/png;base64,AAAA"' in image

    link = sanitize_content('<a href="data:text/html;base64,AAAA">x</a>')
    assert 'data:' not in link
    assert '>x</a>' in link


def test_mailto_links_and_table_attributes():
    assert 'href="mailto:fan@example.com"' in sanitize_content('<a href="mailto:fan@example.com">mail</a>')

    table = sanitize_content('<table class="stats" style="color:red"><tr><td colspan="2">1</td></tr></table>')
    assert 'class="stats"' in table
    assert 'colspan="2"' in table
    assert 'style' not in table


def test_comments_and_embedded_frames_are_removed():
    cleaned = sanitize_content('<p>a<!-- note --></p><iframe src="https://x.test">inner</iframe>')
    assert cleaned == '<p>a</p>'


def test_link_rel_is_kept_as_written():
    cleaned = sanitize_content('<a href="https://example.com" rel="me">x</a>')
    assert 'rel="me"' in cleaned
    assert 'noopener' not in cleaned
