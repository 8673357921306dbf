"""Unit tests for reconciliation against an existing WBS."""
import pytest

from wbs_builder.exceptions import InputShapeError
from wbs_builder.pipeline import generate_wbs, process_equipment, reconcile_wbs
from wbs_builder.wbs.report import export_rows, structure_rows


def row(identifier, description='', status='Y', parent=None, subsystem=None):
    data = {'equipment_number': identifier, 'description': description, 'commissioning_yn': status}
    if parent:
        data['parent_equipment_number'] = parent
    if subsystem:
        data['subsystem'] = subsystem
    return data


def identifiers(items):
    return [item.identifier for item in items]


class TestIdempotence:
    """Reconciling the list a tree was generated from changes nothing."""

    def test_against_generated_nodes(self, generated, equipment_rows):
        """Generated WBSNodes reconcile to zero changes."""
        result = reconcile_wbs(generated.nodes, equipment_rows)
        assert result.added == []
        assert result.removed == []
        assert result.modified == []
        assert sorted(identifiers(result.unchanged)) == ['BAN1', 'T01', 'UH101', 'UH101-F', 'ZZZ-9']
        assert result.new_wbs_items == []

    def test_against_three_column_export(self, generated, equipment_rows):
        """A P6 export (code, parent, name only) reconciles to zero changes."""
        result = reconcile_wbs(export_rows(generated.nodes), equipment_rows)
        assert result.get_summary()['added'] == 0
        assert result.get_summary()['modified'] == 0
        assert result.get_summary()['removed'] == 0
        assert result.new_wbs_items == []

    @pytest.mark.parametrize("identifier", ['S1', 'E', 'M', 'U', '12'])
    def test_section_like_identifier_round_trip(self, identifier):
        """Equipment named like a section is found again in the P6 export."""
        rows = [row(identifier, 'Isolator switch'), row('UH101', 'Protection Panel 101')]
        result = reconcile_wbs(export_rows(generate_wbs(rows).nodes), rows)
        assert result.added == []
        assert sorted(identifiers(result.unchanged)) == sorted([identifier, 'UH101'])
        assert result.new_wbs_items == []

    def test_against_structure_rows(self, generated, equipment_rows):
        """The full structure file reconciles to zero changes."""
        result = reconcile_wbs(structure_rows(generated.nodes), equipment_rows)
        assert result.new_wbs_items == []
        assert result.modified == []

    def test_codes_unchanged(self, generated, equipment_rows):
        """The integrated tree keeps every existing code and marks it not new."""
        result = reconcile_wbs(generated.nodes, equipment_rows)
        assert [n.code for n in result.integrated_tree] == [n.code for n in generated.nodes]
        assert not any(n.is_new for n in result.integrated_tree)


class TestPlacementTiers:
    """Test the three placement tiers and the fallback."""

    def test_same_category_next_slot(self, transformer_tree):
        """T02 joins T01's category at 1.3.4.2; T01 keeps 1.3.4.1."""
        result = reconcile_wbs(transformer_tree, [row('T01', 'Transformer 1'), row('T02', 'Transformer 2')])
        assert identifiers(result.added) == ['T02']
        assert identifiers(result.unchanged) == ['T01']
        assert [(n.code, n.parent_code, n.name) for n in result.new_wbs_items] == [
            ('1.3.4.2', '1.3.4', 'T02 | Transformer 2'),
        ]
        integrated = {n.code: n for n in result.integrated_tree}
        assert integrated['1.3.4.1'].name == 'T01 | Transformer 1'
        assert integrated['1.3.4.1'].is_new is False
        assert integrated['1.3.4.2'].is_new is True

    def test_camel_case_tree(self, transformer_tree):
        """A tree keyed parentCode / displayName places T02 the same way."""
        tree = [
            {'code': r['wbs_code'], 'parentCode': r['parent_wbs_code'] or None, 'displayName': r['wbs_name']}
            for r in transformer_tree
        ]
        result = reconcile_wbs(tree, [row('T01', 'Transformer 1'), row('T02', 'Transformer 2')])
        assert [n.code for n in result.new_wbs_items] == ['1.3.4.2']
        assert result.validation.is_valid

    def test_existing_parent(self, generated, equipment_rows):
        """A new child of an existing parent goes after the parent's children."""
        rows = equipment_rows + [row('UH101-G', 'Relay G', parent='UH101')]
        result = reconcile_wbs(generated.nodes, rows)
        assert [(n.code, n.name) for n in result.new_wbs_items] == [('1.3.2.1.2', 'UH101-G | Relay G')]

    def test_parent_placed_in_same_run(self, generated, equipment_rows):
        """Parents are placed before children, so a new child finds a new parent."""
        rows = equipment_rows + [
            row('UH202-F', 'Relay', parent='UH202'),
            row('UH202', 'Protection Panel 202'),
        ]
        result = reconcile_wbs(generated.nodes, rows)
        codes = {n.identifier: n.code for n in result.new_wbs_items}
        assert codes == {'UH202': '1.3.2.2', 'UH202-F': '1.3.2.2.1'}

    def test_parent_matched_without_marker(self):
        """A parent in the tree written '+UH101' matches a reference to 'UH101'."""
        tree = [
            {'code': '1', 'parent_code': None, 'name': 'Project'},
            {'code': '1.3', 'parent_code': '1', 'name': 'S1 | +Z01 - Main Subsystem'},
            {'code': '1.3.2', 'parent_code': '1.3', 'name': '02 | Protection Panels'},
            {'code': '1.3.2.1', 'parent_code': '1.3.2', 'name': '+UH101 | Protection Panel'},
        ]
        result = reconcile_wbs(tree, [row('+UH101', 'Protection Panel'), row('UH101-G', parent='UH101')])
        assert [n.code for n in result.new_wbs_items] == ['1.3.2.1.1']

    def test_new_subsystem(self, generated, equipment_rows):
        """A new subsystem gets the next root slot with every category."""
        rows = equipment_rows + [
            row('T05', 'Transformer 5', subsystem='33kV Switchroom 2 - +Z02'),
            row('WC7', 'LV Board 7', subsystem='33kV Switchroom 2 - +Z02'),
        ]
        result = reconcile_wbs(generated.nodes, rows)
        names = {n.name: n.code for n in result.new_wbs_items}
        assert names['S2 | +Z02 - 33kV Switchroom 2'] == '1.6'
        assert names['T05 | Transformer 5'] == '1.6.5.1'
        assert names['WC7 | LV Board 7'] == '1.6.4.1'
        assert len(result.new_wbs_items) == 1 + 11 + 2
        assert [s.code for s in result.subsystems.new] == ['+Z02']
        assert [s.code for s in result.subsystems.existing] == ['+Z01']
        assert result.validation.is_valid

    def test_orphaned_child_uses_category(self, generated, equipment_rows):
        """A child of an unknown parent goes under its subsystem and category node."""
        rows = equipment_rows + [row('UH205-F', 'Relay', parent='UH999')]
        result = reconcile_wbs(generated.nodes, rows)
        assert [(n.code, n.parent_code, n.name) for n in result.new_wbs_items] == [
            ('1.3.2.2', '1.3.2', 'UH205-F | Relay'),
        ]
        node = result.new_wbs_items[0]
        assert node.is_orphaned
        assert not node.is_fallback
        codes = {w.code for w in result.warnings}
        assert 'orphaned_child' in codes
        assert 'fallback_placement' not in codes

    def test_orphaned_child_matches_generation(self, equipment_rows):
        """Reconciling an orphan places it where generation would have."""
        rows = equipment_rows + [row('UH205-F', 'Relay', parent='UH999')]
        fresh = {n.identifier: n.code for n in generate_wbs(rows).nodes if n.is_equipment}
        result = reconcile_wbs(generate_wbs(equipment_rows).nodes, rows)
        assert result.new_wbs_items[0].code == fresh['UH205-F']

    def test_new_tbc_item(self, generated, equipment_rows):
        """New TBC equipment goes to the existing TBC section."""
        rows = equipment_rows + [row('BAN2', 'Battery Bank 2', status='TBC')]
        result = reconcile_wbs(generated.nodes, rows)
        assert [(n.code, n.commissioning_status) for n in result.new_wbs_items] == [('1.4.2', 'TBC')]


class TestFallback:
    """Items no tier can place are kept in the unplaced section."""

    def test_unresolvable_parent_without_category(self, transformer_tree):
        """An orphaned child whose category node is missing becomes a fallback node."""
        result = reconcile_wbs(transformer_tree, [row('T01', 'Transformer 1'), row('UH205-F', parent='UH999')])
        assert identifiers(result.added) == ['UH205-F']
        new = {n.code: n for n in result.new_wbs_items}
        assert new['1.4'].name == 'U | Unplaced Equipment'
        assert new['1.4.1'].identifier == 'UH205-F'
        assert new['1.4.1'].is_fallback
        assert new['1.4.1'].is_orphaned
        # one added item plus one synthesized section
        assert len(result.new_wbs_items) == len(result.added) + 1
        assert 'fallback_placement' in {w.code for w in result.warnings}

    def test_known_subsystem_without_category(self, transformer_tree):
        """An existing subsystem missing the category node falls back."""
        result = reconcile_wbs(transformer_tree, [row('T01', 'Transformer 1'), row('UH300')])
        assert [(n.code, n.is_fallback) for n in result.new_wbs_items] == [('1.4', False), ('1.4.1', True)]
        assert result.get_summary()['fallback_items'] == 1

    def test_fallback_section_reused(self, transformer_tree):
        """Several fallback items share one section."""
        result = reconcile_wbs(transformer_tree, [row('T01', 'Transformer 1'), row('UH300'), row('UH301')])
        assert [n.code for n in result.new_wbs_items] == ['1.4', '1.4.1', '1.4.2']


class TestComparison:
    """Test the identity diff."""

    def test_modified_description(self, generated, equipment_rows):
        """A changed description is reported as a field change."""
        rows = [dict(r) for r in equipment_rows]
        rows[2]['description'] = 'Transformer 1A'
        result = reconcile_wbs(generated.nodes, rows)
        assert len(result.modified) == 1
        modified = result.modified[0]
        assert modified.equipment.identifier == 'T01'
        assert modified.existing_node.code == '1.3.5.1'
        assert [(c.field, c.old, c.new) for c in modified.changes] == [
            ('description', 'Transformer 1', 'Transformer 1A'),
        ]
        assert result.new_wbs_items == []

    def test_modified_status(self, generated, equipment_rows):
        """An item moving from TBC to Y is modified, not added."""
        rows = [dict(r) for r in equipment_rows]
        rows[4]['commissioning_yn'] = 'Y'
        result = reconcile_wbs(generated.nodes, rows)
        changes = {c.field: (c.old, c.new) for c in result.modified[0].changes}
        assert changes['commissioning_status'] == ('TBC', 'Y')

    def test_removed(self, generated, equipment_rows):
        """Tree equipment missing from the new list is removed but kept in the tree."""
        rows = [r for r in equipment_rows if r['equipment_number'] != 'ZZZ-9']
        result = reconcile_wbs(generated.nodes, rows)
        assert [n.code for n in result.removed] == ['1.3.11.1']
        assert '1.3.11.1' in {n.code for n in result.integrated_tree}

    def test_accepts_processed_equipment(self, generated, equipment_rows):
        """Already processed equipment is used as-is."""
        result = reconcile_wbs(generated.nodes, process_equipment(equipment_rows))
        assert result.get_summary()['unchanged'] == 5


class TestInputErrors:
    """Fatal input shapes."""

    def test_missing_tree(self, equipment_rows):
        with pytest.raises(InputShapeError):
            reconcile_wbs(None, equipment_rows)

    def test_empty_tree(self, equipment_rows):
        with pytest.raises(InputShapeError):
            reconcile_wbs([], equipment_rows)

    def test_missing_equipment(self, generated):
        with pytest.raises(InputShapeError):
            reconcile_wbs(generated.nodes, None)
