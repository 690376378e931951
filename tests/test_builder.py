"""Structure builder: tree shape, styles, visibility, pseudo-elements and failures."""

import pytest
from conftest import FakeNode

from pluck.exceptions import ExtractionFailed
from pluck.extraction.builder import StructureBuilder
from pluck.extraction.context import ExportContext
from pluck.extraction.models import ElementNode, RawMarkupNode, TextLeaf
from pluck.extraction.settings import ExtractionSettings
from pluck.extraction.styles import SYSTEM_FONT_STACK


def build(root: FakeNode, settings: ExtractionSettings | None = None, base_url: str = ''):
	context = ExportContext(settings=settings or ExtractionSettings(), base_url=base_url)
	frozen = context.bind_snapshot(root)
	return StructureBuilder(context).build_root(frozen), context


def shared_style(node: ElementNode, context: ExportContext) -> dict[str, str]:
	return context.style_registry.get(node.style_ref) or {}


# ---------------------------------------------------------------------------
# Tree shape
# ---------------------------------------------------------------------------


class TestOrderPreservation:
	def test_text_and_elements_interleave(self):
		paragraph = FakeNode('p', 'Hello ', FakeNode('b', 'World', style={'display': 'inline'}), '!')
		node, _ = build(paragraph)

		assert [type(child) for child in node.children] == [TextLeaf, ElementNode, TextLeaf]
		assert node.children[0] == TextLeaf('Hello')
		assert node.children[1].tag == 'b'
		assert node.children[1].text == 'World'
		assert node.children[2] == TextLeaf('!')
		assert node.text is None

	def test_leaf_keeps_text_on_the_node(self):
		node, _ = build(FakeNode('span', '  Label  '))
		assert node.text == 'Label'
		assert node.children == []
		assert node.is_leaf

	def test_whitespace_only_text_is_dropped(self):
		node, _ = build(FakeNode('div', '\n  ', FakeNode('span', 'a'), '\n'))
		assert [child.tag for child in node.children] == ['span']

	def test_wrapped_source_text_collapses_to_one_line(self):
		node, _ = build(FakeNode('p', 'Lorem ipsum dolor\n      sit amet'))
		assert node.text == 'Lorem ipsum dolor sit amet'

	def test_text_runs_between_elements_collapse(self):
		paragraph = FakeNode('p', ' Read\n\t the ', FakeNode('b', 'docs', style={'display': 'inline'}))
		node, _ = build(paragraph)
		assert node.children[0] == TextLeaf('Read the')


class TestShadowContent:
	def test_shadow_children_come_first(self):
		host = FakeNode(
			'my-card',
			FakeNode('b', 'outside'),
			shadow=[FakeNode('span', 'inside')],
		)
		node, _ = build(host)
		assert [child.text for child in node.children] == ['inside', 'outside']


class TestPruning:
	def test_empty_span_is_dropped(self):
		node, _ = build(FakeNode('div', FakeNode('span'), FakeNode('span', 'kept')))
		assert [child.text for child in node.children] == ['kept']

	def test_empty_div_is_kept(self):
		node, _ = build(FakeNode('div', FakeNode('div', style={'background-color': 'rgb(255, 0, 0)'})))
		assert len(node.children) == 1

	def test_span_with_own_background_is_kept(self):
		status_dot = FakeNode('span', style={'display': 'inline-block', 'background-color': 'rgb(0, 200, 0)'}, width=8, height=8)
		node, context = build(FakeNode('div', status_dot, FakeNode('b', 'Online')))

		assert [child.tag for child in node.children] == ['span', 'b']
		assert shared_style(node.children[0], context)['background-color'] == '#00C800'

	def test_span_with_background_image_is_kept(self):
		badge = FakeNode('span', style={'background-image': 'linear-gradient(red, blue)'})
		node, _ = build(FakeNode('div', badge))
		assert len(node.children) == 1

	def test_pruning_can_be_disabled(self):
		node, _ = build(FakeNode('div', FakeNode('span')), settings=ExtractionSettings(prune_empty_wrappers=False))
		assert len(node.children) == 1


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class TestSharedStyles:
	def test_zero_margin_is_filtered(self):
		node, context = build(FakeNode('div', style={'margin-top': '0px'}))
		assert 'margin-top' not in shared_style(node, context)

	def test_non_zero_margin_is_kept(self):
		node, context = build(FakeNode('div', style={'margin-top': '12px'}))
		assert shared_style(node, context)['margin-top'] == '12px'

	def test_identical_siblings_share_a_name(self):
		card = FakeNode(
			'div',
			FakeNode('span', 'a', style={'color': 'rgb(0, 0, 0)'}),
			FakeNode('span', 'b', style={'color': 'rgb(0, 0, 0)'}),
		)
		node, context = build(card)
		first, second = node.children
		assert first.style_ref == second.style_ref
		assert len(context.style_registry) == 2

	def test_colors_are_normalized(self):
		node, context = build(FakeNode('div', style={'color': 'rgba(10, 20, 30, 1)', 'background-color': 'rgba(0, 0, 0, 0.5)'}))
		styles = shared_style(node, context)
		assert styles['color'] == '#0A141E'
		assert styles['background-color'] == 'rgba(0, 0, 0, 0.5)'

	def test_offsets_skipped_for_static_position(self):
		node, context = build(FakeNode('div', style={'top': '10px'}))
		assert 'top' not in shared_style(node, context)

		node, context = build(FakeNode('div', style={'position': 'relative', 'top': '10px'}))
		assert shared_style(node, context)['top'] == '10px'

	def test_list_style_only_on_lists(self):
		node, context = build(FakeNode('div', style={'list-style-type': 'disc'}))
		assert 'list-style-type' not in shared_style(node, context)

		node, context = build(FakeNode('li', 'item', style={'list-style-type': 'disc'}))
		assert shared_style(node, context)['list-style-type'] == 'disc'

	def test_backdrop_filter_falls_back_to_webkit(self):
		node, context = build(FakeNode('div', style={'backdrop-filter': 'none', '-webkit-backdrop-filter': 'blur(8px)'}))
		assert shared_style(node, context)['backdrop-filter'] == 'blur(8px)'


class TestBorders:
	border = {'border-width': '1px', 'border-style': 'solid'}

	def test_border_inheriting_text_color_is_dropped(self):
		style = {**self.border, 'border-color': 'rgb(0, 0, 255)', 'color': 'rgb(0, 0, 255)'}
		node, context = build(FakeNode('div', style=style))
		assert not any(prop.startswith('border-') for prop in shared_style(node, context))

	def test_neutral_border_is_kept(self):
		style = {**self.border, 'border-color': 'rgb(200, 200, 200)', 'color': 'rgb(200, 200, 200)'}
		node, context = build(FakeNode('div', style=style))
		assert shared_style(node, context)['border-color'] == '#C8C8C8'

	def test_distinct_border_color_is_kept(self):
		style = {**self.border, 'border-color': 'rgb(255, 0, 0)', 'color': 'rgb(0, 0, 255)'}
		node, context = build(FakeNode('div', style=style))
		assert shared_style(node, context)['border-style'] == 'solid'


class TestFonts:
	def test_system_stack_is_replaced(self):
		node, context = build(FakeNode('div', style={'font-family': 'system-ui, sans-serif'}))
		assert shared_style(node, context)['font-family'] == SYSTEM_FONT_STACK

	def test_web_fonts_are_detected(self):
		node, context = build(FakeNode('div', style={'font-family': '"Inter", sans-serif'}))
		assert shared_style(node, context)['font-family'] == '"Inter", sans-serif'
		assert context.detected_web_fonts == {'Inter'}


class TestRootBackground:
	def test_root_inherits_ancestor_background(self):
		root = FakeNode('div', 'content')
		FakeNode('html', FakeNode('body', FakeNode('main', root), style={'background-color': 'rgb(1, 2, 3)'}))
		node, context = build(root)
		assert shared_style(node, context)['background-color'] == '#010203'

	def test_own_background_wins(self):
		root = FakeNode('div', 'content', style={'background-color': 'rgb(255, 255, 255)'})
		FakeNode('body', root, style={'background-color': 'rgb(1, 2, 3)'})
		node, context = build(root)
		assert shared_style(node, context)['background-color'] == '#FFFFFF'


class TestSizing:
	def test_image_is_pinned(self):
		node, _ = build(FakeNode('div', FakeNode('img', attributes={'src': '/a.png'}, width=200, height=100)))
		assert node.children[0].inline_style == {
			'width': '200px',
			'min-width': '200px',
			'height': '100px',
			'min-height': '100px',
		}

	def test_span_is_fluid(self):
		node, _ = build(FakeNode('div', FakeNode('span', 'x', style={'display': 'inline-block'}, width=200, height=100)))
		assert node.children[0].inline_style == {'min-width': '200px', 'width': 'auto', 'min-height': '100px', 'height': 'auto'}

	def test_inline_elements_are_not_boxed(self):
		node, _ = build(FakeNode('div', FakeNode('span', 'x', style={'display': 'inline'})))
		assert node.children[0].inline_style is None


# ---------------------------------------------------------------------------
# Visibility and vector graphics
# ---------------------------------------------------------------------------


class TestVisibility:
	def test_hidden_children_are_dropped(self):
		card = FakeNode(
			'div',
			FakeNode('span', 'sr only', style={'position': 'absolute', 'width': '1px', 'height': '1px'}, width=1, height=1),
			FakeNode('div', 'gone', style={'display': 'none'}),
			FakeNode('div', 'kept', width=40, height=40),
		)
		node, _ = build(card)
		assert [child.text for child in node.children] == ['kept']

	def test_hidden_root_yields_nothing(self):
		node, _ = build(FakeNode('div', 'x', style={'visibility': 'hidden'}))
		assert node is None


class TestVectorGraphics:
	def test_svg_markup_is_preserved(self):
		svg = FakeNode(
			'svg',
			FakeNode('path', attributes={'d': 'M0 0L10 10'}),
			attributes={'viewBox': '0 0 10 10', 'class': 'logo web-replica-selected'},
			style={'width': '24px', 'height': '24px', 'fill': 'rgb(0, 0, 0)'},
		)
		node, _ = build(FakeNode('div', svg))
		raw = node.children[0]
		assert isinstance(raw, RawMarkupNode)
		assert raw.markup.startswith('<svg viewBox="0 0 10 10" class="logo"')
		assert 'web-replica-selected' not in raw.markup
		assert 'width: 24px;' in raw.markup
		assert 'fill: rgb(0, 0, 0);' in raw.markup
		assert '<path d="M0 0L10 10"></path>' in raw.markup

	def test_decorative_circle_ring_is_dropped(self):
		ring = FakeNode('svg', FakeNode('circle', attributes={'fill': 'none', 'r': '10'}))
		node, _ = build(FakeNode('div', ring, FakeNode('span', 'name')))
		assert [getattr(child, 'tag', None) for child in node.children] == ['span']

	def test_filled_circle_is_kept(self):
		dot = FakeNode('svg', FakeNode('circle', attributes={'fill': '#f00', 'r': '10'}))
		node, _ = build(FakeNode('div', dot))
		assert isinstance(node.children[0], RawMarkupNode)


# ---------------------------------------------------------------------------
# Pseudo-elements, icons and attributes
# ---------------------------------------------------------------------------


class TestPseudoDecoration:
	def test_avatar_letter_merges_background(self):
		avatar = FakeNode(
			'div',
			pseudo={
				'::before': {
					'content': '"A"',
					'background-color': 'rgb(255, 0, 0)',
					'border-radius': '50%',
					'color': 'rgb(255, 255, 255)',
					'width': '32px',
				}
			},
		)
		node, context = build(avatar)
		assert node.text == 'A'
		assert node.pseudo.from_pseudo
		assert node.pseudo.radius == '50%'
		assert node.pseudo.width == '32px'
		assert shared_style(node, context)['background-color'] == '#FF0000'

	def test_long_content_is_not_a_decoration(self):
		node, _ = build(FakeNode('div', 'x', pseudo={'::after': {'content': '"Read more"'}}))
		assert node.pseudo is None
		assert node.text == 'x'

	@pytest.mark.parametrize('content', ['none', 'normal', '""'])
	def test_absent_content(self, content):
		node, _ = build(FakeNode('div', pseudo={'::before': {'content': content}}))
		assert node.pseudo is None

	def test_after_is_used_when_before_is_empty(self):
		node, _ = build(FakeNode('div', pseudo={'::before': {'content': 'none'}, '::after': {'content': "'Â»'"}}))
		assert node.text == 'Â»'
		assert node.pseudo.source == '::after'

	def test_pseudo_does_not_replace_own_text(self):
		node, _ = build(FakeNode('span', 'Name', pseudo={'::before': {'content': '"*"'}}))
		assert node.text == 'Name'
		assert not node.pseudo.from_pseudo


class TestIcons:
	def test_material_icon(self):
		icon = FakeNode('i', 'home', attributes={'class': 'material-icons'}, style={'font-family': '"Material Icons"'})
		node, _ = build(FakeNode('div', icon))
		assert node.children[0].text == 'home'
		assert node.children[0].icon.font == 'material-icons'

	def test_symbols_font(self):
		node, _ = build(FakeNode('span', 'search', style={'font-family': '"Material Symbols Outlined"'}))
		assert node.icon.font == 'material-symbols'

	def test_marker_classes_do_not_trigger_icons(self):
		node, _ = build(FakeNode('span', 'Hi', attributes={'class': 'web-replica-hover'}))
		assert node.icon is None

	def test_icon_text_runs_keep_whitespace(self):
		icon = FakeNode('i', ' ★ ', FakeNode('b', 'x'), attributes={'class': 'material-icons'})
		node, _ = build(icon)
		assert node.children[0] == TextLeaf(' ★ ')

	def test_icon_font_allows_longer_pseudo_content(self):
		glyph = FakeNode('span', style={'font-family': 'FontAwesome'}, pseudo={'::before': {'content': '"\\f015 \\f016"'}})
		node, _ = build(glyph)
		assert node.pseudo is not None
		assert node.pseudo.from_pseudo


class TestAttributes:
	def test_link_is_made_absolute(self):
		node, _ = build(FakeNode('a', 'Docs', attributes={'href': '../docs'}), base_url='https://example.com/app/page')
		assert node.attributes.href == 'https://example.com/docs'

	def test_input_placeholder_falls_back_to_aria_label(self):
		node, _ = build(FakeNode('div', FakeNode('input', attributes={'aria-label': 'Search'})))
		attributes = node.children[0].attributes
		assert attributes.placeholder == 'Search'
		assert attributes.aria_label == 'Search'
		assert attributes.type == 'text'

	def test_input_value_comes_from_the_property(self):
		field_node = FakeNode('input', attributes={'value': 'old', 'type': 'email'}, properties={'value': 'typed'})
		node, _ = build(FakeNode('div', field_node))
		assert node.children[0].attributes.value == 'typed'
		assert node.children[0].attributes.type == 'email'

	def test_button_type_defaults_to_submit(self):
		node, _ = build(FakeNode('button', 'Go'))
		assert node.attributes.type == 'submit'

	def test_href_ignored_on_non_links(self):
		node, _ = build(FakeNode('div', 'x', attributes={'href': '/nope'}))
		assert node.attributes.href is None


# ---------------------------------------------------------------------------
# Hover capture and failures
# ---------------------------------------------------------------------------


class TestHoverCapture:
	def test_disabled_by_default(self):
		button = FakeNode('button', 'Go', style={'color': 'rgb(0, 0, 0)'}, hover={'color': 'rgb(255, 0, 0)'})
		_, context = build(button)
		assert len(context.hover_registry) == 0

	def test_enabled_records_delta_for_interactive_tags(self):
		button = FakeNode('button', 'Go', style={'color': 'rgb(0, 0, 0)'}, hover={'color': 'rgb(255, 0, 0)'})
		node, context = build(button, settings=ExtractionSettings(capture_hover_styles=True))
		assert context.hover_registry.get(node.style_ref) == {'color': '#FF0000'}

	def test_non_interactive_tags_never_capture(self):
		card = FakeNode('div', 'x', style={'color': 'rgb(0, 0, 0)'}, hover={'color': 'rgb(255, 0, 0)'})
		_, context = build(card, settings=ExtractionSettings(capture_hover_styles=True))
		assert len(context.hover_registry) == 0


class TestFailures:
	def test_child_failure_is_absorbed(self):
		broken = FakeNode('span', 'broken')
		broken.fail_style = True
		node, _ = build(FakeNode('div', broken, FakeNode('span', 'fine')))
		assert [child.text for child in node.children] == ['fine']

	def test_root_failure_aborts(self):
		root = FakeNode('div', 'x')
		root.fail_style = True
		with pytest.raises(ExtractionFailed) as exc_info:
			build(root)
		assert exc_info.value.tag == 'div'
