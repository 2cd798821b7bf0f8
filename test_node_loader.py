# test_node_loader.py
import pytest

from conftest import CCBIWriter, NodeSpec, build_document
from core.constants import PositionType, PropertyType as P, SizeType, TargetType
from core.errors import FormatError
from core.scene_node import CCBFile, SceneNode
from loaders import (
    CCBFileLoader,
    GENERIC_NODE_CLASSES,
    BlockData,
    NodeLoader,
    NodeLoaderLibrary,
    get_absolute_position,
    get_absolute_size,
)
from readers import create_reader


class ButtonNode(SceneNode):
    """Node with both callback capabilities of cocos menu items and controls"""

    def __init__(self, class_name='CCControlButton'):
        super().__init__(class_name)
        self.targets = []
        self.callbacks = []

    def add_target_with_action_for_control_events(self, target, action, events):
        self.targets.append((target, action, events))

    def set_callback(self, callback, target):
        self.callbacks.append((callback, target))


class ButtonLoader(NodeLoader):
    node_class = ButtonNode


class Handlers:
    def __init__(self):
        self.resolved = []

    def on_play(self):
        pass

    def on_resolve_ccb_menu_item_selector(self, target, name):
        self.resolved.append(name)
        return self.on_play if name == 'onPlay' else None

    def on_resolve_ccb_cccontrol_selector(self, target, name):
        self.resolved.append(name)
        return self.on_play


# --- Geometry helpers ---

class TestAbsolutePosition:
    @pytest.mark.parametrize("position_type, expected", [
        (PositionType.RELATIVE_BOTTOM_LEFT, (10.0, 20.0)),
        (PositionType.RELATIVE_TOP_LEFT, (10.0, 180.0)),
        (PositionType.RELATIVE_TOP_RIGHT, (290.0, 180.0)),
        (PositionType.RELATIVE_BOTTOM_RIGHT, (290.0, 20.0)),
        (PositionType.PERCENT, (30.0, 40.0)),
        (PositionType.MULTIPLY_RESOLUTION, (20.0, 40.0)),
    ])
    def test_position_types(self, position_type, expected):
        assert get_absolute_position((10.0, 20.0), position_type, (300.0, 200.0), 2.0) == expected

    def test_percent_truncates(self):
        assert get_absolute_position((33.0, 33.0), PositionType.PERCENT, (100.0, 10.0)) == (33.0, 3.0)


class TestAbsoluteSize:
    @pytest.mark.parametrize("size_type, expected", [
        (SizeType.ABSOLUTE, (50.0, 25.0)),
        (SizeType.PERCENT, (200.0, 100.0)),
        (SizeType.RELATIVE_CONTAINER, (350.0, 375.0)),
        (SizeType.HORIZONTAL_PERCENT, (200.0, 25.0)),
        (SizeType.VERTICAL_PERCENT, (50.0, 100.0)),
        (SizeType.MULTIPLY_RESOLUTION, (100.0, 50.0)),
    ])
    def test_size_types(self, size_type, expected):
        assert get_absolute_size((50.0, 25.0), size_type, (400.0, 400.0), 2.0) == expected


# --- Library ---

class TestLoaderLibrary:
    def test_default_library(self):
        library = NodeLoaderLibrary.new_default_library()
        assert 'CCNode' in library
        assert isinstance(library.get_loader('CCBFile'), CCBFileLoader)
        for class_name in GENERIC_NODE_CLASSES:
            assert isinstance(library.get_loader(class_name), NodeLoader)
        assert len(library) == len(GENERIC_NODE_CLASSES) + 2

    def test_register_and_purge(self):
        library = NodeLoaderLibrary()
        assert library.get_loader('CCNode') is None
        loader = NodeLoader()
        library.register_loader('CCNode', loader)
        assert library.get_loader('CCNode') is loader
        library.unregister_loader('CCNode')
        library.unregister_loader('CCNode')
        assert 'CCNode' not in library
        library.register_loader('CCNode', loader)
        library.purge()
        assert len(library) == 0

    def test_empty_library_has_no_fallback(self):
        reader = create_reader(NodeLoaderLibrary())
        with pytest.raises(FormatError):
            reader.read_node_graph_from_data(build_document(NodeSpec()))


# --- Property parsing ---

class TestPropertyParsing:
    def test_unknown_property_type(self):
        writer = CCBIWriter()
        writer.write_sequences()
        writer.write_string('CCNode')
        writer.write_uint(TargetType.NONE)
        writer.write_uint(0)
        writer.write_uint(1)
        writer.write_uint(0)
        writer.write_uint(99)
        writer.write_string('mystery')
        writer.write_byte(0)
        with pytest.raises(FormatError):
            create_reader().read_node_graph_from_data(writer.build())

    def test_scalar_and_compound_values(self):
        root = NodeSpec('CCParticleSystemQuad', props=[
            (P.FLOAT_VAR, 'life', (1.5, 0.25)),
            (P.FLOAT_XY, 'gravity', (2.0, -3.0)),
            (P.FLOAT, 'speed', 12.0),
            (P.INTEGER_LABELED, 'emitterMode', -1),
            (P.BYTE, 'opacity', 200),
            (P.FLIP, 'flip', (True, False)),
            (P.BLENDMODE, 'blendFunc', (770, 771)),
            (P.FNT_FILE, 'fntFile', 'font.fnt'),
            (P.FONT_TTF, 'fontName', 'Arial'),
            (P.TEXT, 'string', 'Hello'),
            (P.ANIMATION, 'animation', ('anims.plist', 'walk')),
        ])
        node = create_reader(root_path='res/').read_node_graph_from_data(build_document(root))
        props = node.properties

        assert props['life'] == (1.5, 0.25)
        assert props['gravity'] == (2.0, -3.0)
        assert props['speed'] == 12.0
        assert props['emitterMode'] == -1
        assert props['opacity'] == 200
        assert props['flip'] == (True, False)
        assert props['blendFunc'] == (770, 771)
        assert props['fntFile'] == 'res/font.fnt'
        assert props['fontName'] == 'Arial'
        assert props['string'] == 'Hello'
        assert props['animation'] == ('res/anims.plist', 'walk')

    def test_resolution_scale(self):
        root = NodeSpec(props=[
            (P.SCALE_LOCK, 'scale', (1.5, 2.0, 1)),
            (P.FLOAT_SCALE, 'fontSize', (12.0, 1)),
            (P.POSITION, 'position', (10.0, 20.0, PositionType.MULTIPLY_RESOLUTION)),
        ])
        node = create_reader(resolution_scale=2.0).read_node_graph_from_data(build_document(root))
        assert (node.scale_x, node.scale_y) == (3.0, 4.0)
        assert node.properties['fontSize'] == 24.0
        assert node.position == (20.0, 40.0)


# --- Selector blocks in direct mode ---

class TestSelectorBlocks:
    def reader(self, **kwargs):
        reader = create_reader(**kwargs)
        reader.loader_library.register_loader('CCControlButton', ButtonLoader())
        reader.loader_library.register_loader('CCMenuItemImage', ButtonLoader())
        return reader

    def test_owner_resolves_menu_selector(self):
        owner = Handlers()
        root = NodeSpec(children=[NodeSpec('CCMenuItemImage', props=[
            (P.BLOCK, 'block', ('onPlay', TargetType.OWNER))])])
        node = self.reader().read_node_graph_from_data(build_document(root), owner=owner)

        item = node.children[0]
        assert item.callbacks == [(owner.on_play, owner)]
        assert owner.resolved == ['onPlay']

    def test_control_selector_uses_control_events(self):
        owner = Handlers()
        root = NodeSpec(children=[NodeSpec('CCControlButton', props=[
            (P.BLOCK_CCCONTROL, 'ccControl', ('onTouch', TargetType.OWNER, 32))])])
        node = self.reader().read_node_graph_from_data(build_document(root), owner=owner)

        button = node.children[0]
        assert button.targets == [(owner, owner.on_play, 32)]
        assert button.callbacks == []

    def test_selector_resolver_fallback(self):
        resolver = Handlers()
        root = NodeSpec('CCMenuItemImage', props=[
            (P.BLOCK, 'block', ('onPlay', TargetType.DOCUMENT_ROOT))])
        node = self.reader(selector_resolver=resolver).read_node_graph_from_data(build_document(root))
        assert node.callbacks == [(resolver.on_play, node)]

    def test_unresolved_selector_is_skipped(self, messages):
        owner = Handlers()
        root = NodeSpec('CCMenuItemImage', props=[
            (P.BLOCK, 'block', ('onMissing', TargetType.OWNER))])
        node = self.reader(progress_callback=messages.append).read_node_graph_from_data(
            build_document(root), owner=owner)
        assert node.callbacks == []
        assert any("onMissing" in m for m in messages)

    def test_no_target_selector(self):
        root = NodeSpec('CCMenuItemImage', props=[(P.BLOCK, 'block', ('', TargetType.NONE))])
        node = self.reader().read_node_graph_from_data(build_document(root))
        assert node.callbacks == []

    def test_plain_node_keeps_block(self):
        owner = Handlers()
        root = NodeSpec('CCSprite', props=[(P.BLOCK, 'block', ('onPlay', TargetType.OWNER))])
        node = create_reader().read_node_graph_from_data(build_document(root), owner=owner)
        assert node.properties['callbacks'] == [BlockData(owner.on_play, owner)]


class TestCCBFileLoader:
    def test_creates_wrapper(self):
        loader = CCBFileLoader()
        reader = create_reader()
        reader.current_class_name = 'CCBFile'
        node = loader.load_node(None, reader)
        assert isinstance(node, CCBFile)
        assert node.ccb_file_node is None
