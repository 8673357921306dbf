"""Unit tests for input normalization."""
import pytest

from wbs_builder.exceptions import InputShapeError
from wbs_builder.models import EquipmentRecord, WBSNode
from wbs_builder.transformers import EquipmentNormalizer, WbsTreeNormalizer


class TestEquipmentNormalizer:
    """Test equipment list normalization."""

    def test_normalizer_initialization(self):
        """Test normalizer initialization."""
        normalizer = EquipmentNormalizer()
        assert normalizer.name == 'equipment'

    def test_split_by_status(self, equipment_rows):
        """Records are bucketed by commissioning status."""
        result = EquipmentNormalizer().normalize(equipment_rows)
        assert [r.identifier for r in result.regular] == ['UH101', 'UH101-F', 'T01', 'ZZZ-9']
        assert [r.identifier for r in result.tbc] == ['BAN1']
        assert [r.identifier for r in result.excluded] == ['WC1']
        assert result.original_count == 6

    def test_field_synonyms(self):
        """Both historical field-name spellings are accepted."""
        rows = [
            {
                'equipment_code': 'uh5',
                'equipment_name': 'Panel 5',
                'Commissioning (Y/N)': 'yes',
                'parent_equipment_code': '-',
                'Subsystem': '33kV Switchroom 1 - +Z01',
            },
        ]
        record = EquipmentNormalizer().transform(rows)[0]
        assert record == EquipmentRecord(
            identifier='UH5',
            description='Panel 5',
            commissioning_status='Y',
            parent_identifier=None,
            subsystem='33kV Switchroom 1 - +Z01',
            source_index=0,
        )

    def test_record_key_spellings(self):
        """identifier / commissioningStatus / parentIdentifier keys are accepted."""
        rows = [{
            'identifier': 'uh101-f',
            'description': 'Feeder Relay',
            'commissioningStatus': 'TBC',
            'parentIdentifier': 'UH101',
        }]
        record = EquipmentNormalizer().transform(rows)[0]
        assert record.identifier == 'UH101-F'
        assert record.commissioning_status == 'TBC'
        assert record.parent_identifier == 'UH101'

    def test_identifier_cleanup(self):
        """Identifiers are trimmed, upper-cased and whitespace-collapsed."""
        rows = [{'equipment_number': '  test   bay 1 ', 'commissioning_yn': 'Y'}]
        assert EquipmentNormalizer().transform(rows)[0].identifier == 'TEST BAY 1'

    @pytest.mark.parametrize("identifier,code", [
        ('', 'empty_identifier'),
        (None, 'empty_identifier'),
        ('-', 'placeholder_identifier'),
    ])
    def test_unusable_identifier_skipped(self, identifier, code):
        """Rows without a usable identifier are dropped with an issue."""
        rows = [
            {'equipment_number': identifier, 'commissioning_yn': 'Y'},
            {'equipment_number': 'T1', 'commissioning_yn': 'Y'},
        ]
        result = EquipmentNormalizer().normalize(rows)
        assert [r.identifier for r in result.records] == ['T1']
        assert [i.code for i in result.issues] == [code]

    def test_unknown_status_excluded(self):
        """Blank or unknown commissioning values are treated as N with an issue."""
        rows = [{'equipment_number': 'T1', 'commissioning_yn': 'maybe'}]
        result = EquipmentNormalizer().normalize(rows)
        assert result.excluded[0].commissioning_status == 'N'
        assert result.issues[0].code == 'unknown_commissioning_status'

    def test_duplicates_keep_richer_description(self):
        """Duplicates in one status bucket collapse to the longer description."""
        rows = [
            {'equipment_number': 'T1', 'description': 'TX', 'commissioning_yn': 'Y'},
            {'equipment_number': 't1', 'description': 'Transformer 1', 'commissioning_yn': 'Y'},
        ]
        result = EquipmentNormalizer().normalize(rows)
        assert len(result.regular) == 1
        assert result.regular[0].description == 'Transformer 1'
        assert result.regular[0].source_index == 0
        assert result.issues[0].code == 'duplicate_identifier'

    def test_same_identifier_in_different_buckets(self):
        """The same identifier may appear once per status."""
        rows = [
            {'equipment_number': 'T1', 'commissioning_yn': 'Y'},
            {'equipment_number': 'T1', 'commissioning_yn': 'TBC'},
        ]
        result = EquipmentNormalizer().normalize(rows)
        assert len(result.regular) == 1
        assert len(result.tbc) == 1

    def test_records_pass_through(self):
        """EquipmentRecords are accepted unchanged."""
        record = EquipmentRecord('T1', 'Transformer', 'Y')
        assert EquipmentNormalizer().transform([record]) == [record]

    @pytest.mark.parametrize("data", [None, [], {'equipment_number': 'T1'}, 'T1'])
    def test_bad_input_shape(self, data):
        """Missing, empty or non-list input is fatal."""
        with pytest.raises(InputShapeError):
            EquipmentNormalizer().normalize(data)

    def test_non_mapping_row(self):
        """Rows must be mappings."""
        with pytest.raises(InputShapeError):
            EquipmentNormalizer().normalize([['T1', 'Y']])

    def test_validate_transformation(self, equipment_rows):
        """Normalized output passes its own validation."""
        normalizer = EquipmentNormalizer()
        assert normalizer.validate_transformation(normalizer.transform(equipment_rows))


class TestWbsTreeNormalizer:
    """Test existing WBS tree normalization."""

    def test_both_spellings(self):
        """code/name and wbs_code/wbs_name are both accepted."""
        rows = [
            {'code': '1', 'parent_code': None, 'name': 'Project'},
            {'wbs_code': '1.1', 'parent_wbs_code': '1', 'wbs_name': 'M | Milestones'},
        ]
        nodes = WbsTreeNormalizer().transform(rows)
        assert [(n.code, n.parent_code, n.name) for n in nodes] == [
            ('1', None, 'Project'),
            ('1.1', '1', 'M | Milestones'),
        ]

    def test_camel_case_keys(self):
        """parentCode / displayName / isEquipment keys are accepted."""
        rows = [
            {'code': '1', 'parentCode': None, 'displayName': 'Project'},
            {'code': '1.3', 'parentCode': '1', 'displayName': 'S1 | +Z01 - Main Subsystem'},
            {'code': '1.3.4', 'parentCode': '1.3', 'displayName': '05 | Transformers',
             'isEquipment': False},
            {'code': '1.3.4.1', 'parentCode': '1.3.4', 'displayName': 'T01 | Transformer 1',
             'isEquipment': True},
        ]
        result = WbsTreeNormalizer().normalize(rows)
        assert [(n.code, n.parent_code, n.name) for n in result.nodes][1] == (
            '1.3', '1', 'S1 | +Z01 - Main Subsystem',
        )
        assert [n.is_equipment for n in result.nodes] == [False, False, False, True]
        assert result.issues == []

    def test_level_from_code_depth(self, transformer_tree):
        """Missing levels are derived from the code."""
        nodes = WbsTreeNormalizer().transform(transformer_tree)
        assert [n.level for n in nodes] == [1, 2, 3, 4]

    def test_equipment_detected_from_name(self, transformer_tree):
        """Equipment names are recognised; structural names are not."""
        nodes = {n.code: n for n in WbsTreeNormalizer().transform(transformer_tree)}
        assert nodes['1.3.4.1'].is_equipment
        assert nodes['1.3.4.1'].identifier == 'T01'
        assert nodes['1.3.4.1'].description == 'Transformer 1'
        assert not nodes['1.3.4'].is_equipment
        assert nodes['1.3.4'].category == '05'
        assert not nodes['1.3'].is_equipment
        assert not nodes['1'].is_equipment

    @pytest.mark.parametrize("identifier", ['S1', 'E', 'U', '12', 'EP2'])
    def test_equipment_detected_from_position(self, transformer_tree, identifier):
        """Under a category node, a section-like token is still equipment."""
        rows = transformer_tree + [
            {'wbs_code': '1.3.4.2', 'parent_wbs_code': '1.3.4', 'wbs_name': f'{identifier} | Isolator'},
            {'wbs_code': '1.4', 'parent_wbs_code': '1', 'wbs_name': 'TBC | To Be Confirmed'},
            {'wbs_code': '1.4.1', 'parent_wbs_code': '1.4', 'wbs_name': f'{identifier}-1 | Spare'},
        ]
        nodes = {n.code: n for n in WbsTreeNormalizer().transform(rows)}
        assert nodes['1.3.4.2'].is_equipment
        assert nodes['1.3.4.2'].identifier == identifier
        assert nodes['1.3.4.2'].is_structural is False
        assert nodes['1.4.1'].is_equipment
        assert not nodes['1.4'].is_equipment

    def test_explicit_flag_wins(self):
        """An is_equipment column overrides name detection."""
        rows = [{'code': '1.2', 'parent_code': '1', 'name': 'X1 | Thing', 'is_equipment': 'False'}]
        assert not WbsTreeNormalizer().transform(rows)[0].is_equipment

    def test_rows_without_code_skipped(self):
        """Rows with no code are reported and skipped."""
        result = WbsTreeNormalizer().normalize([
            {'code': '1', 'name': 'Project'},
            {'code': '', 'name': 'Lost'},
        ])
        assert len(result.nodes) == 1
        assert result.issues[0].code == 'missing_wbs_code'

    def test_dangling_parent_reported(self):
        """A parent code that is not in the tree is a data-quality issue."""
        result = WbsTreeNormalizer().normalize([
            {'code': '1', 'name': 'Project'},
            {'code': '1.7.1', 'parent_code': '1.7', 'name': 'T01 | Transformer'},
        ])
        assert len(result.nodes) == 2
        assert [i.code for i in result.issues] == ['missing_parent_code']
        assert '1.7' in result.issues[0].message

    def test_nodes_pass_through_as_existing(self):
        """WBSNodes are accepted and marked not new."""
        node = WBSNode(code='1', parent_code=None, name='Project', level=1, is_new=True)
        assert WbsTreeNormalizer().transform([node])[0].is_new is False

    @pytest.mark.parametrize("data", [None, []])
    def test_missing_tree(self, data):
        """A missing or empty tree is fatal."""
        with pytest.raises(InputShapeError):
            WbsTreeNormalizer().normalize(data)

    def test_duplicate_codes_fail_validation(self):
        """validate_transformation flags duplicate codes."""
        normalizer = WbsTreeNormalizer()
        nodes = normalizer.transform([
            {'code': '1', 'name': 'Project'},
            {'code': '1', 'name': 'Project again'},
        ])
        assert not normalizer.validate_transformation(nodes)
