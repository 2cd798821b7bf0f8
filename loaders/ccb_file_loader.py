#!/usr/bin/env python3
"""
CCBFile Loader Module
Loader for embedded sub-file wrappers.

The wrapper's 'ccbFile' property names another .ccbi file; the reader
decodes it in place and the loader stores the resulting graph on the
wrapper. The reader then splices the wrapper out of the tree.
"""

from core.constants import PropertyType
from core.scene_node import CCBFile

from .node_loader import NodeLoader


class CCBFileLoader(NodeLoader):
    """Loader for 'CCBFile' nodes"""

    node_class = CCBFile

    def on_handle_property(self, node, parent, reader, prop_type, name, value):
        if prop_type == PropertyType.CCB_FILE and name == 'ccbFile':
            node.ccb_file_node = value
        else:
            super().on_handle_property(node, parent, reader, prop_type, name, value)
