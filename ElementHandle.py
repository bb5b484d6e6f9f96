import xml.etree.ElementTree as ET
from typing import Optional, Union


class ElementHandle:
    """
    Thin wrapper over an `xml.etree.ElementTree.Element` giving attribute access and the
    element's position among its siblings.

    An ElementTree element does not know its parent, so the positional helpers need the
    document root the element lives in. Without a root the element is treated as detached:
    its index is 0 and it has no owning form.

    Accepted inputs:
        - An `Element`.
        - Another `ElementHandle` (its element and root are reused).
        - A markup string starting with '<', parsed into a new detached element.
        - Any other string, used as an identifier: the element with that `id` under `root`,
          or a new detached `<div id="...">` when there is no such element.
    """

    def __init__(self, element: Union[ET.Element, 'ElementHandle', str],
                 root: Optional[ET.Element] = None):
        if isinstance(element, ElementHandle):
            self.__root = root if root is not None else element.root
            self.__element = element.raw
        elif isinstance(element, str):
            self.__root = root
            self.__element = self.__resolve_string(element, root)
        elif isinstance(element, ET.Element):
            self.__root = root
            self.__element = element
        else:
            raise TypeError(f'Cannot wrap {type(element).__name__} as an element')

    def __repr__(self):
        return f"<ElementHandle {self.__element.tag} {self.__element.attrib}>"

    @property
    def raw(self) -> ET.Element:
        return self.__element

    @property
    def root(self) -> Optional[ET.Element]:
        return self.__root

    def attr(self, name: str, value: Optional[str] = None) -> Optional[str]:
        """Reads attribute `name`, or writes it when `value` is given."""
        if value is not None:
            self.__element.set(name, value)
            return value
        return self.__element.get(name)

    def parent(self) -> Optional[ET.Element]:
        if self.__root is None or self.__root is self.__element:
            return None
        for candidate in self.__root.iter():
            for child in candidate:
                if child is self.__element:
                    return candidate
        return None

    def index(self) -> int:
        """Position of the element among its siblings, 0 when detached."""
        parent = self.parent()
        if parent is None:
            return 0
        for i, child in enumerate(parent):
            if child is self.__element:
                return i
        return 0

    def form(self) -> Optional[ET.Element]:
        """The closest ancestor `form` element, if any."""
        if self.__root is None:
            return None
        parents = {child: parent for parent in self.__root.iter() for child in parent}
        node = parents.get(self.__element)
        while node is not None:
            if node.tag == 'form':
                return node
            node = parents.get(node)
        return None

    @staticmethod
    def __resolve_string(text: str, root: Optional[ET.Element]) -> ET.Element:
        if text.lstrip().startswith('<'):
            return ET.fromstring(text)
        if root is not None:
            if root.get('id') == text:
                return root
            for node in root.iter():
                if node.get('id') == text:
                    return node
        return ET.Element('div', {'id': text})
