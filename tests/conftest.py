"""Shared fixtures and feed samples for RSS Gallery tests."""

import pytest

from rss_gallery.rss.models import FeedItem
from tests.factories import make_item

SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example News</title>
    <link>https://news.example.com</link>
    <image>
      <title>Example News logo</title>
      <url>https://news.example.com/logo.png</url>
      <link>https://news.example.com</link>
      <width>144</width>
      <height>40</height>
    </image>
    <item>
      <title>First story</title>
      <link>https://news.example.com/1</link>
      <description><![CDATA[<p>Lead of the <b>first</b> story</p>]]></description>
      <pubDate>Mon, 15 Jan 2024 10:30:00 +0000</pubDate>
      <dc:creator>Kari Nordmann</dc:creator>
      <category>Politics</category>
      <category>Local</category>
      <media:content url="media.example.com/pic.jpg" medium="image">
        <media:title>A picture</media:title>
        <media:credit>Photo: Ola</media:credit>
      </media:content>
      <enclosure url="https://cdn.example.com/ignored.jpg" type="image/jpeg"/>
    </item>
    <item>
      <title>Second story</title>
      <link>https://news.example.com/2</link>
      <description>Plain lead</description>
      <enclosure url="https:/cdn.example.com/x.png" type="image/png"/>
    </item>
    <item>
      <title>Third story</title>
      <link>https://news.example.com/3</link>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_RSS_XML


@pytest.fixture
def ten_items() -> list[FeedItem]:
    return [make_item(n) for n in range(1, 11)]
