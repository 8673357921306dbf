"""Unit tests for dotted codes, the node arena and WBS names."""
import pytest

from wbs_builder.models import SubsystemDescriptor, WBSNode
from wbs_builder.wbs.arena import WbsArena
from wbs_builder.wbs.codes import code_depth, code_sort_key, compare_codes, parent_of, sort_nodes
from wbs_builder.wbs.naming import (
    format_equipment_name,
    format_subsystem_name,
    is_structural_name,
    parse_equipment_name,
    parse_subsystem_label,
    parse_subsystem_name,
)


def node(code, parent=None, name='x'):
    return WBSNode(code=code, parent_code=parent, name=name, level=code_depth(code))


class TestCodes:
    """Test dotted-code helpers."""

    def test_numeric_segment_order(self):
        """1.3.10.1 sorts after 1.3.2.9."""
        assert compare_codes('1.3.10.1', '1.3.2.9') == 1
        assert compare_codes('1.3.2.9', '1.3.10.1') == -1
        assert compare_codes('1.3', '1.3') == 0

    def test_parent_sorts_before_child(self):
        """A prefix sorts before its extensions."""
        assert code_sort_key('1.3') < code_sort_key('1.3.1')

    def test_sort_nodes(self):
        """Nodes sort depth-first by numeric segments."""
        codes = ['1.10', '1.2.1', '1', '1.2', '1.9']
        assert [n.code for n in sort_nodes(node(c) for c in codes)] == ['1', '1.2', '1.2.1', '1.9', '1.10']

    @pytest.mark.parametrize("code,expected", [
        ('1', None),
        ('1.3', '1'),
        ('1.3.10.2', '1.3.10'),
    ])
    def test_parent_of(self, code, expected):
        """Parent code is the code minus its last segment."""
        assert parent_of(code) == expected


class TestWbsArena:
    """Test code allocation from stored children."""

    def test_allocation_is_contiguous(self):
        """Children get 1, 2, 3 under a parent."""
        arena = WbsArena([node('1')])
        codes = []
        for _ in range(3):
            code = arena.allocate_code('1')
            arena.add(node(code, '1'))
            codes.append(code)
        assert codes == ['1.1', '1.2', '1.3']

    def test_allocation_continues_after_existing(self):
        """Allocation scans existing children, gaps included."""
        arena = WbsArena([node('1'), node('1.3', '1'), node('1.3.4', '1.3'), node('1.3.9', '1.3')])
        assert arena.allocate_code('1.3') == '1.3.10'
        assert arena.allocate_code('1.3.4') == '1.3.4.1'

    def test_duplicates_kept_aside(self):
        """A second node with the same code does not replace the first."""
        arena = WbsArena([node('1', name='first'), node('1', name='second')])
        assert arena.get('1').name == 'first'
        assert [n.name for n in arena.duplicates] == ['second']
        assert len(arena) == 1

    def test_children_and_level(self):
        """children_of and level_below follow the stored nodes."""
        arena = WbsArena([node('1'), node('1.1', '1'), node('1.2', '1')])
        assert [n.code for n in arena.children_of('1')] == ['1.1', '1.2']
        assert arena.level_below('1.2') == 3
        assert [n.code for n in arena.roots()] == ['1']


class TestNaming:
    """Test WBS display names."""

    def test_subsystem_label(self):
        """'<name> - <code>' labels are split on the last separator."""
        assert parse_subsystem_label('33kV Switchroom 1 - +Z01') == SubsystemDescriptor('+Z01', '33kV Switchroom 1')
        assert parse_subsystem_label('Switchroom') == SubsystemDescriptor('', 'Switchroom')
        assert parse_subsystem_label('') is None

    def test_subsystem_name_round_trip(self):
        """Subsystem section names parse back to the same key."""
        descriptor = SubsystemDescriptor('+Z02', '33kV Switchroom 2')
        name = format_subsystem_name(2, descriptor)
        assert name == 'S2 | +Z02 - 33kV Switchroom 2'
        number, parsed = parse_subsystem_name(name)
        assert number == 2
        assert parsed.key == descriptor.key

    def test_legacy_subsystem_name(self):
        """The older 'S1 | Z01 | Name' form is still read."""
        number, parsed = parse_subsystem_name('S1 | Z01 | Main Subsystem')
        assert (number, parsed.code, parsed.name) == (1, 'Z01', 'Main Subsystem')

    def test_equipment_name(self):
        """Equipment names are '<id> | <description>'."""
        assert format_equipment_name('UH101', 'Protection Panel 101') == 'UH101 | Protection Panel 101'
        assert format_equipment_name('UH101', '') == 'UH101 |'
        assert parse_equipment_name('uh101 | Protection Panel 101') == ('UH101', 'Protection Panel 101')
        assert parse_equipment_name('UH101 |') == ('UH101', '')

    @pytest.mark.parametrize("name", [
        'M | Milestones',
        'P | Pre-requisites',
        'S3 | +Z03 - Area',
        '05 | Transformers',
        'TBC | To Be Confirmed',
        'E | Energisation',
        'EP2 | HV Energisation',
        'U | Unplaced Equipment',
    ])
    def test_structural_names(self, name):
        """Section names are never read as equipment."""
        assert is_structural_name(name)
        assert parse_equipment_name(name) is None
