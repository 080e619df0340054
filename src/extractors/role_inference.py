#!/usr/bin/env python3
"""
Role Inference for Chat Share Parser
Decides whether a markup fragment is a user, assistant or system turn.

Rules run in a fixed order and the first one that answers wins: explicit
role attributes, then user markers, then system markers, then sibling
alternation, then the assistant default. Assistant markers can be switched on
to run just before alternation. Marker vocabularies are configuration data
(see RoleHints), not code.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from bs4 import Tag

from models import MessageRole

logger = logging.getLogger(__name__)

EXPLICIT_ROLES = {
    'user': MessageRole.USER,
    'assistant': MessageRole.ASSISTANT,
    'system': MessageRole.SYSTEM,
}

@dataclass
class RoleHints:
    """Tunable marker lists used by the heuristic rules"""
    role_attributes: List[str] = field(default_factory=lambda: [
        'data-role', 'data-message-author-role', 'data-author-role',
    ])
    user_classes: List[str] = field(default_factory=lambda: [
        'user-message', 'user-content', 'user',
    ])
    user_testid_keywords: List[str] = field(default_factory=lambda: ['user'])
    user_html_markers: List[str] = field(default_factory=lambda: ['user-avatar'])
    user_text_markers: List[str] = field(default_factory=lambda: ['You:'])
    system_classes: List[str] = field(default_factory=lambda: ['system-message'])
    system_html_markers: List[str] = field(default_factory=lambda: ['system-avatar'])
    system_text_markers: List[str] = field(default_factory=lambda: ['System:'])
    assistant_classes: List[str] = field(default_factory=lambda: [
        'assistant-message', 'assistant',
    ])
    assistant_html_markers: List[str] = field(default_factory=lambda: ['assistant-avatar'])
    assistant_text_markers: List[str] = field(default_factory=lambda: ['Assistant:'])
    # Assistant markers only run when enabled, ahead of alternation
    use_assistant_markers: bool = False

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> 'RoleHints':
        """Build hints from the 'roles' configuration section"""
        section = (config or {}).get('roles') or {}
        known = cls.__dataclass_fields__
        overrides = {}
        for key, value in section.items():
            if key not in known or value is None:
                continue
            overrides[key] = list(value) if isinstance(value, (list, tuple)) else value
        return cls(**overrides)

@dataclass
class FragmentContext:
    """Everything role inference may look at for one candidate node"""
    attributes: Dict[str, str] = field(default_factory=dict)
    classes: Tuple[str, ...] = ()
    element_id: str = ''
    test_id: str = ''
    ancestor_classes: Tuple[str, ...] = ()
    descendant_classes: Tuple[str, ...] = ()
    inner_html: str = ''
    text: str = ''
    index: int = 0
    sibling_count: int = 1

    @classmethod
    def from_tag(cls, tag: Tag) -> 'FragmentContext':
        attributes = {}
        for name, value in tag.attrs.items():
            if isinstance(value, list):
                value = ' '.join(value)
            attributes[name] = str(value)

        ancestor_classes = []
        for parent in tag.parents:
            if isinstance(parent, Tag):
                ancestor_classes.extend(parent.get('class') or [])

        descendant_classes = []
        for child in tag.find_all(True):
            descendant_classes.extend(child.get('class') or [])

        parent = tag.parent
        siblings = parent.find_all(True, recursive=False) if parent is not None else [tag]
        index = next((i for i, sibling in enumerate(siblings) if sibling is tag), 0)

        return cls(
            attributes=attributes,
            classes=tuple(tag.get('class') or []),
            element_id=attributes.get('id', ''),
            test_id=attributes.get('data-testid', ''),
            ancestor_classes=tuple(ancestor_classes),
            descendant_classes=tuple(descendant_classes),
            inner_html=tag.decode_contents(),
            text=tag.get_text(),
            index=index,
            sibling_count=len(siblings),
        )

Rule = Callable[[FragmentContext], Optional[MessageRole]]

class RoleInferenceEngine:
    """Ordered rule list; the first rule returning a role wins"""

    def __init__(self, hints: Optional[RoleHints] = None):
        self.hints = hints or RoleHints()
        self.rules: List[Tuple[str, Rule]] = [
            ('explicit_attribute', self._explicit_attribute),
            ('user_markers', self._user_markers),
            ('system_markers', self._system_markers),
        ]
        if self.hints.use_assistant_markers:
            self.rules.append(('assistant_markers', self._assistant_markers))
        self.rules.extend([
            ('alternation', self._alternation),
            ('default', self._default),
        ])

    def infer(self, context: FragmentContext) -> MessageRole:
        for name, rule in self.rules:
            role = rule(context)
            if role is not None:
                logger.debug(f"Role {role.value} decided by rule '{name}'")
                return role
        return MessageRole.ASSISTANT

    def infer_tag(self, tag: Tag) -> MessageRole:
        return self.infer(FragmentContext.from_tag(tag))

    def _explicit_attribute(self, context: FragmentContext) -> Optional[MessageRole]:
        for attribute in self.hints.role_attributes:
            value = context.attributes.get(attribute, '').strip().lower()
            if value in EXPLICIT_ROLES:
                return EXPLICIT_ROLES[value]
        return None

    def _user_markers(self, context: FragmentContext) -> Optional[MessageRole]:
        hints = self.hints
        test_id = context.test_id.lower()
        if (self._has_class(context, hints.user_classes)
                or context.element_id in hints.user_classes
                or any(keyword in test_id for keyword in hints.user_testid_keywords)
                or self._contains_any(context.inner_html, hints.user_html_markers)
                or self._contains_any(context.text, hints.user_text_markers)):
            return MessageRole.USER
        return None

    def _system_markers(self, context: FragmentContext) -> Optional[MessageRole]:
        hints = self.hints
        if (self._has_class(context, hints.system_classes)
                or self._contains_any(context.inner_html, hints.system_html_markers)
                or self._contains_any(context.text, hints.system_text_markers)):
            return MessageRole.SYSTEM
        return None

    def _assistant_markers(self, context: FragmentContext) -> Optional[MessageRole]:
        hints = self.hints
        if (self._has_class(context, hints.assistant_classes)
                or self._contains_any(context.inner_html, hints.assistant_html_markers)
                or self._contains_any(context.text, hints.assistant_text_markers)):
            return MessageRole.ASSISTANT
        return None

    @staticmethod
    def _alternation(context: FragmentContext) -> Optional[MessageRole]:
        # Assumes strict turn-taking; consecutive same-role turns get misread
        if context.sibling_count > 1:
            return MessageRole.USER if context.index % 2 == 0 else MessageRole.ASSISTANT
        return None

    @staticmethod
    def _default(context: FragmentContext) -> Optional[MessageRole]:
        return MessageRole.ASSISTANT

    @staticmethod
    def _has_class(context: FragmentContext, names: List[str]) -> bool:
        """Whole-token match on the node, its ancestors or its descendants"""
        wanted = set(names)
        return bool(wanted.intersection(context.classes)
                    or wanted.intersection(context.ancestor_classes)
                    or wanted.intersection(context.descendant_classes))

    @staticmethod
    def _contains_any(haystack: str, needles: List[str]) -> bool:
        return any(needle and needle in haystack for needle in needles)
