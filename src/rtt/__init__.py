"""
rtt - 随机树 (Random Tree) 存储能力

规划器只通过 ``RandomTree`` 抽象接口消费树结构：
1. create_root: 以初始状态创建根节点
2. expand: 在已有节点下挂接新状态
3. state_of / all_states: 读取节点状态（最近邻线性扫描用）
4. path_from_root: 重建 根 → 节点 的状态序列

存储方式（数组、链表、空间索引）对规划器透明。
"""

from .random_tree import NodeRef, TreeStates, RandomTree, VecRandomTree

__all__ = [
    'NodeRef',
    'TreeStates',
    'RandomTree',
    'VecRandomTree',
]
