"""Library for ordering rendered documents the way they would be installed.

Prerequisite resources are created first: namespaces, then custom resource
definitions, access control, configuration and storage, workloads, and
networking. Anything else follows and lifecycle hooks come last.

The precedence is expressed as data in `INSTALL_ORDER` so it can be inspected
or extended without changing the sort:
```python
from chart_preview.ordering import INSTALL_ORDER, KindCategory, KindMatcher, sort_documents

order = (KindMatcher(KindCategory.CRD, ("MyDefinition",)),) + INSTALL_ORDER
documents = sort_documents(documents, order)
```
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import enum
import logging

from .manifest import SplitDocument

__all__ = [
    "KindCategory",
    "KindMatcher",
    "INSTALL_ORDER",
    "categorize",
    "sort_documents",
]

_LOGGER = logging.getLogger(__name__)


class KindCategory(str, enum.Enum):
    """A group of resource kinds installed together."""

    NAMESPACE = "namespace"
    CRD = "crd"
    RBAC = "rbac"
    CONFIG = "config"
    WORKLOAD = "workload"
    NETWORK = "network"
    OTHER = "other"
    HOOK = "hook"


@dataclass(frozen=True)
class KindMatcher:
    """Matches documents belonging to a category.

    The position of a kind in `kinds` orders documents within the category. An
    empty `kinds` matches any document.
    """

    category: KindCategory
    """The category assigned to matching documents."""

    kinds: tuple[str, ...] = ()
    """Resource kinds in this category, in install order."""

    hooks: bool = False
    """Match documents annotated as lifecycle hooks regardless of kind."""

    def matches(self, document: SplitDocument) -> bool:
        """Return true if the document belongs to this category."""
        if self.hooks:
            return document.is_hook
        if not self.kinds:
            return True
        return document.kind in self.kinds

    def kind_rank(self, document: SplitDocument) -> int:
        """Return the position of the document kind within the category."""
        if document.kind in self.kinds:
            return self.kinds.index(document.kind)
        return len(self.kinds)


INSTALL_ORDER: tuple[KindMatcher, ...] = (
    KindMatcher(KindCategory.NAMESPACE, ("Namespace",)),
    KindMatcher(KindCategory.CRD, ("CustomResourceDefinition",)),
    KindMatcher(
        KindCategory.RBAC,
        (
            "PodSecurityPolicy",
            "ServiceAccount",
            "ClusterRole",
            "ClusterRoleList",
            "ClusterRoleBinding",
            "ClusterRoleBindingList",
            "Role",
            "RoleList",
            "RoleBinding",
            "RoleBindingList",
        ),
    ),
    KindMatcher(
        KindCategory.CONFIG,
        (
            "ResourceQuota",
            "LimitRange",
            "PriorityClass",
            "PodDisruptionBudget",
            "Secret",
            "SecretList",
            "ConfigMap",
            "StorageClass",
            "PersistentVolume",
            "PersistentVolumeClaim",
        ),
    ),
    KindMatcher(
        KindCategory.WORKLOAD,
        (
            "DaemonSet",
            "Pod",
            "ReplicationController",
            "ReplicaSet",
            "Deployment",
            "HorizontalPodAutoscaler",
            "StatefulSet",
            "Job",
            "CronJob",
        ),
    ),
    KindMatcher(
        KindCategory.NETWORK,
        (
            "NetworkPolicy",
            "Service",
            "IngressClass",
            "Ingress",
            "APIService",
        ),
    ),
    KindMatcher(KindCategory.OTHER),
    KindMatcher(KindCategory.HOOK, hooks=True),
)
"""Default install order for rendered documents."""


_CATEGORY_PRECEDENCE = list(KindCategory)


def _specificity(matcher: KindMatcher) -> int:
    if matcher.hooks:
        return 0
    return 1 if matcher.kinds else 2


def _match(
    document: SplitDocument, order: Sequence[KindMatcher]
) -> tuple[int, KindMatcher] | None:
    """Return the first matcher for the document and its position in the order."""
    # Hook rows win over kind rows and catch-all rows apply last
    candidates = sorted(enumerate(order), key=lambda item: _specificity(item[1]))
    for index, matcher in candidates:
        if matcher.matches(document):
            return index, matcher
    return None


def _rank(
    document: SplitDocument, order: Sequence[KindMatcher]
) -> tuple[int, int, int]:
    """Return the sort key of a document for the specified order.

    Documents group by category precedence first, so extra rows for a
    category sort with that category wherever they appear in the order.
    """
    if (match := _match(document, order)) is None:
        return (len(_CATEGORY_PRECEDENCE), 0, 0)
    index, matcher = match
    return (
        _CATEGORY_PRECEDENCE.index(matcher.category),
        index,
        matcher.kind_rank(document),
    )


def categorize(
    document: SplitDocument, order: Sequence[KindMatcher] = INSTALL_ORDER
) -> KindCategory:
    """Return the category of the document."""
    if (match := _match(document, order)) is None:
        return KindCategory.OTHER
    return match[1].category


def sort_documents(
    documents: Iterable[SplitDocument], order: Sequence[KindMatcher] = INSTALL_ORDER
) -> list[SplitDocument]:
    """Return the documents sorted by install order.

    The sort is stable so documents that rank the same keep their relative
    order from the input.
    """
    result = sorted(documents, key=lambda document: _rank(document, order))
    _LOGGER.debug("Sorted %d documents", len(result))
    return result
