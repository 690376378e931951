"""Shared-style and hover-style registries."""

from pluck.extraction.registry import HoverRegistry, StyleRegistry, canonical_key


class TestStyleRegistry:
	def test_names_are_sequential(self):
		registry = StyleRegistry()
		assert registry.intern({'color': '#000000'}) == 's1'
		assert registry.intern({'color': '#FFFFFF'}) == 's2'

	def test_insertion_order_does_not_matter(self):
		registry = StyleRegistry()
		first = registry.intern({'color': '#000000', 'font-size': '14px'})
		second = registry.intern({'font-size': '14px', 'color': '#000000'})
		assert first == second
		assert len(registry) == 1

	def test_canonical_key_is_stable(self):
		assert canonical_key({'b': '1', 'a': '2'}) == canonical_key({'a': '2', 'b': '1'})

	def test_interned_record_is_a_copy(self):
		registry = StyleRegistry()
		record = {'color': '#000000'}
		name = registry.intern(record)
		record['color'] = '#FFFFFF'
		assert registry.get(name) == {'color': '#000000'}

	def test_reset_restarts_the_counter(self):
		registry = StyleRegistry()
		registry.intern({'color': '#000000'})
		registry.reset()
		assert len(registry) == 0
		assert 's1' not in registry
		assert registry.intern({'opacity': '0.5'}) == 's1'

	def test_items_follow_creation_order(self):
		registry = StyleRegistry()
		registry.intern({'z-index': '2'})
		registry.intern({'color': '#000000'})
		assert [name for name, _ in registry.items()] == ['s1', 's2']


class TestHoverRegistry:
	def test_empty_delta_is_ignored(self):
		hover = HoverRegistry()
		hover.register('s1', {})
		hover.register('s2', None)
		assert len(hover) == 0

	def test_delta_is_stored_under_the_style_name(self):
		hover = HoverRegistry()
		hover.register('s1', {'color': '#FF0000'})
		assert 's1' in hover
		assert hover.get('s1') == {'color': '#FF0000'}
