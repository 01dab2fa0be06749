"""Tests for chat message parsing and product extraction."""

from restock_price_bot.messages import (
    ChatMessage,
    Embed,
    EmbedField,
    extract_product_mentions,
    parse_restock_embed,
)


def _embed(title=None, description=None, author=None, footer=None, **fields):
    return Embed(
        title=title,
        description=description,
        author_name=author,
        footer_text=footer,
        fields=[EmbedField(name=k.replace("_", " ").title(), value=v) for k, v in fields.items()],
    )


class TestEmbed:
    """Test Embed helpers."""

    def test_from_dict(self):
        embed = Embed.from_dict(
            {
                "title": "Surging Sparks Booster Box",
                "author": {"name": "Target"},
                "footer": {"text": "Target | Restock Alerts"},
                "fields": [{"name": "Price", "value": "$143.64", "inline": True}],
            }
        )

        assert embed.title == "Surging Sparks Booster Box"
        assert embed.author_name == "Target"
        assert embed.footer_text == "Target | Restock Alerts"
        assert embed.fields[0].inline is True

    def test_from_dict_null_fields(self):
        embed = Embed.from_dict({"title": "Restock", "fields": None})
        assert embed.title == "Restock"
        assert embed.fields == []

    def test_get_field_case_insensitive(self):
        embed = _embed(price="$49.99")
        assert embed.get_field("PRICE") == "$49.99"
        assert embed.get_field("stock") is None


class TestChatMessage:
    def test_from_dict(self):
        message = ChatMessage.from_dict(
            {
                "content": None,
                "author_id": "42",
                "channel_id": "100",
                "embeds": [{"title": "Prismatic Evolutions ETB"}],
            }
        )
        assert message.content == ""
        assert message.author_id == "42"
        assert message.embeds[0].title == "Prismatic Evolutions ETB"

    def test_from_dict_null_embeds(self):
        message = ChatMessage.from_dict({"content": "hi", "embeds": None})
        assert message.content == "hi"
        assert message.embeds == []

    def test_searchable_text_includes_embed_titles(self):
        message = ChatMessage(content="Restock!", embeds=[_embed(title="Queue is live")])
        assert "Queue is live" in message.searchable_text()


class TestExtractProductMentions:
    """Test finding product names in free-form messages."""

    def test_embed_title_with_price(self):
        message = ChatMessage(
            embeds=[_embed(title="Pokemon TCG: Surging Sparks Booster Box", price="$143.64")]
        )
        mentions = extract_product_mentions(message)

        assert len(mentions) == 1
        assert mentions[0].name == "Pokemon TCG: Surging Sparks Booster Box"
        assert mentions[0].retail_price == "$143.64"

    def test_embed_description_lines(self):
        message = ChatMessage(
            embeds=[
                _embed(
                    title="In stock now",
                    description="Prismatic Evolutions ETB\nshort\nSurging Sparks Booster Bundle",
                )
            ]
        )
        names = [m.name for m in extract_product_mentions(message)]
        assert names == ["Prismatic Evolutions ETB", "Surging Sparks Booster Bundle"]

    def test_content_lines(self):
        message = ChatMessage(
            content="Restocked at Walmart:\nScarlet & Violet 151 ETB\nCharizard ex Premium Collection"
        )
        names = [m.name for m in extract_product_mentions(message)]
        assert names == ["Scarlet & Violet 151 ETB", "Charizard ex Premium Collection"]

    def test_whole_content_fallback(self):
        """If the content mentions a product but no line qualifies alone, use all of it."""
        message = ChatMessage(content="ETB drop\nat target now")
        mentions = extract_product_mentions(message)

        assert len(mentions) == 1
        assert mentions[0].name == "ETB drop\nat target now"

    def test_short_lines_ignored(self):
        message = ChatMessage(content="ETB drop")
        assert extract_product_mentions(message) == []

    def test_unrelated_message(self):
        message = ChatMessage(content="Anyone want to grab lunch later today?")
        assert extract_product_mentions(message) == []

    def test_empty_message(self):
        assert extract_product_mentions(ChatMessage()) == []


class TestParseRestockEmbed:
    """Test structured parsing of restock monitor embeds."""

    def test_full_embed(self):
        message = ChatMessage(
            author_name="Target Restocks",
            embeds=[
                _embed(
                    title="Pokemon Trading Card Game: Prismatic Evolutions Elite Trainer Box",
                    author="Target",
                    price="$49.99",
                    type="Restock",
                    total_stock="120",
                    tcin="93954435",
                )
            ],
        )
        announcement = parse_restock_embed(message)

        assert announcement is not None
        assert announcement.retailer == "Target"
        assert announcement.price == "$49.99"
        assert announcement.type == "Restock"
        assert announcement.stock == "120"
        assert announcement.tcin == "93954435"
        assert announcement.raw_title == announcement.product_name

    def test_retailer_from_footer(self):
        message = ChatMessage(
            embeds=[_embed(title="Surging Sparks Booster Box", footer="Walmart | 12:00 PM")]
        )
        assert parse_restock_embed(message).retailer == "Walmart"

    def test_retailer_from_message_author(self):
        message = ChatMessage(
            author_name="Best Buy Restocks",
            embeds=[_embed(title="Surging Sparks Booster Box")],
        )
        assert parse_restock_embed(message).retailer == "Best Buy Restocks"

    def test_retailer_unknown(self):
        message = ChatMessage(embeds=[_embed(title="Surging Sparks Booster Box")])
        assert parse_restock_embed(message).retailer == "Unknown"

    def test_name_from_description(self):
        message = ChatMessage(
            embeds=[_embed(description="Paldea Evolved Booster Box\nLimit 2 per customer")]
        )
        assert parse_restock_embed(message).product_name == "Paldea Evolved Booster Box"

    def test_stock_field_fallback(self):
        message = ChatMessage(embeds=[_embed(title="Stellar Crown ETB", stock="5")])
        assert parse_restock_embed(message).stock == "5"

    def test_no_embeds(self):
        assert parse_restock_embed(ChatMessage(content="Pokemon restock")) is None

    def test_not_pokemon(self):
        message = ChatMessage(embeds=[_embed(title="PlayStation 5 Console")])
        assert parse_restock_embed(message) is None
