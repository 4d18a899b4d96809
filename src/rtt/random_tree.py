"""
rtt/random_tree.py - 随机树接口与数组实现

``RandomTree`` 定义规划器消费的最小操作集；``VecRandomTree`` 是
只追加的数组实现，节点引用即数组下标。

契约说明:
    传入不属于本树的 ``NodeRef``、对非空树重复创建根节点等均属于
    编程契约错误，统一抛出 ``ValueError``，调用方不应尝试恢复。
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar('S')


@dataclass(frozen=True)
class NodeRef:
    """树节点的不透明引用（在所属树的生命周期内稳定）"""
    index: int
    tree_id: int = 0


@dataclass
class TreeStates(Generic[S]):
    """``all_states`` 的返回值

    Attributes:
        root: (根节点引用, 根状态)
        children: [(节点引用, 状态), ...]，按插入顺序
    """
    root: Tuple[NodeRef, S]
    children: List[Tuple[NodeRef, S]] = field(default_factory=list)


class RandomTree(ABC, Generic[S]):
    """只追加的随机树抽象接口

    Example:
        >>> tree = VecRandomTree()
        >>> root = tree.create_root(p0)
        >>> child = tree.expand(root, p1)
        >>> tree.path_from_root(child)
        [p0, p1]
    """

    @property
    @abstractmethod
    def n_nodes(self) -> int:
        """节点总数（含根）"""

    @abstractmethod
    def create_root(self, state: S) -> NodeRef:
        """以 state 创建根节点"""

    @abstractmethod
    def expand(self, parent: NodeRef, state: S) -> NodeRef:
        """在 parent 下挂接新状态，返回新节点引用"""

    @abstractmethod
    def state_of(self, ref: NodeRef) -> S:
        """节点状态"""

    @abstractmethod
    def all_states(self) -> TreeStates[S]:
        """枚举全部节点状态：先根，后按树序的子节点"""

    @abstractmethod
    def path_from_root(self, ref: NodeRef) -> List[S]:
        """根 → ref 的状态序列"""


class VecRandomTree(RandomTree[S]):
    """数组实现：``_states[i]`` 与 ``_parents[i]`` 平行存储

    Args:
        tree_id: 树标识，写入每个 NodeRef，用于拒绝其它树的引用
    """

    _next_tree_id = 0

    def __init__(self, tree_id: Optional[int] = None) -> None:
        if tree_id is None:
            tree_id = VecRandomTree._next_tree_id
            VecRandomTree._next_tree_id += 1
        self.tree_id = tree_id
        self._states: List[Any] = []
        self._parents: List[Optional[int]] = []

    @property
    def n_nodes(self) -> int:
        return len(self._states)

    def _check_ref(self, ref: NodeRef) -> int:
        if not isinstance(ref, NodeRef) or ref.tree_id != self.tree_id:
            raise ValueError(f"节点引用 {ref!r} 不属于树 {self.tree_id}")
        if not 0 <= ref.index < len(self._states):
            raise ValueError(f"节点引用越界: {ref.index} (共 {len(self._states)} 个节点)")
        return ref.index

    def create_root(self, state: S) -> NodeRef:
        if self._states:
            raise ValueError(f"树 {self.tree_id} 已有根节点")
        self._states.append(state)
        self._parents.append(None)
        logger.debug("树 %d: 创建根节点 %s", self.tree_id, state)
        return NodeRef(0, self.tree_id)

    def expand(self, parent: NodeRef, state: S) -> NodeRef:
        parent_idx = self._check_ref(parent)
        self._states.append(state)
        self._parents.append(parent_idx)
        return NodeRef(len(self._states) - 1, self.tree_id)

    def state_of(self, ref: NodeRef) -> S:
        return self._states[self._check_ref(ref)]

    def all_states(self) -> TreeStates[S]:
        if not self._states:
            raise ValueError(f"树 {self.tree_id} 为空")
        return TreeStates(
            root=(NodeRef(0, self.tree_id), self._states[0]),
            children=[
                (NodeRef(i, self.tree_id), self._states[i])
                for i in range(1, len(self._states))
            ],
        )

    def path_from_root(self, ref: NodeRef) -> List[S]:
        idx: Optional[int] = self._check_ref(ref)
        rev_path = []
        while idx is not None:
            rev_path.append(self._states[idx])
            idx = self._parents[idx]
        rev_path.reverse()
        return rev_path

    def __repr__(self) -> str:
        return f"VecRandomTree(tree_id={self.tree_id}, n_nodes={self.n_nodes})"
