"""Comment rule: disabled code left behind in comments"""

import re
from typing import Iterable

from styleaudit.models import CommentNode, DeclarationNode, RuleNode, StyleRule, Violation
from styleaudit.parser import ParseError, parse_stylesheet
from styleaudit.rules.base import LintRule, RuleContext


PROPERTY_NAME = re.compile(r'^(\$|--|-)?[a-z][a-z0-9-]*$')

VENDOR_PREFIX = re.compile(r'^-(webkit|moz|ms|o)-')

# Standard property names, so prose like "note: fix later" is not taken for code
CSS_PROPERTIES = frozenset("""
    align-content align-items align-self all animation animation-delay
    animation-direction animation-duration animation-fill-mode
    animation-iteration-count animation-name animation-play-state
    animation-timing-function appearance aspect-ratio backdrop-filter
    backface-visibility background background-attachment background-blend-mode
    background-clip background-color background-image background-origin
    background-position background-repeat background-size block-size border
    border-block border-bottom border-bottom-color border-bottom-left-radius
    border-bottom-right-radius border-bottom-style border-bottom-width
    border-collapse border-color border-image border-inline border-left
    border-left-color border-left-style border-left-width border-radius
    border-right border-right-color border-right-style border-right-width
    border-spacing border-style border-top border-top-color
    border-top-left-radius border-top-right-radius border-top-style
    border-top-width border-width bottom box-shadow box-sizing break-after
    break-before break-inside caption-side caret-color clear clip clip-path
    color column-count column-gap column-rule column-span column-width columns
    contain content counter-increment counter-reset cursor direction display
    empty-cells fill filter flex flex-basis flex-direction flex-flow flex-grow
    flex-shrink flex-wrap float font font-family font-feature-settings
    font-size font-stretch font-style font-variant font-weight gap grid
    grid-area grid-auto-columns grid-auto-flow grid-auto-rows grid-column
    grid-column-end grid-column-start grid-row grid-row-end grid-row-start
    grid-template grid-template-areas grid-template-columns grid-template-rows
    height hyphens inline-size inset isolation justify-content justify-items
    justify-self left letter-spacing line-height list-style list-style-image
    list-style-position list-style-type margin margin-block margin-bottom
    margin-inline margin-left margin-right margin-top mask max-height
    max-width min-height min-width mix-blend-mode object-fit object-position
    opacity order outline outline-color outline-offset outline-style
    outline-width overflow overflow-wrap overflow-x overflow-y padding
    padding-block padding-bottom padding-inline padding-left padding-right
    padding-top page-break-after page-break-before page-break-inside
    perspective perspective-origin place-content place-items place-self
    pointer-events position quotes resize right rotate row-gap scale
    scroll-behavior scroll-margin scroll-padding scroll-snap-align
    scroll-snap-type stroke stroke-width tab-size table-layout text-align
    text-decoration text-decoration-color text-decoration-line
    text-decoration-style text-indent text-overflow text-rendering
    text-shadow text-transform top touch-action transform transform-origin
    transform-style transition transition-delay transition-duration
    transition-property transition-timing-function translate unicode-bidi
    user-select vertical-align visibility white-space width will-change
    word-break word-spacing word-wrap writing-mode z-index zoom
""".split())


def is_property_name(name: str) -> bool:
    """Check a declaration name is a variable, custom property or known CSS property"""
    if not PROPERTY_NAME.match(name):
        return False
    if name.startswith('$') or name.startswith('--'):
        return True
    return VENDOR_PREFIX.sub('', name) in CSS_PROPERTIES


def _is_code(statements) -> bool:
    if not statements:
        return False
    for statement in statements:
        if isinstance(statement, RuleNode):
            if statement.declarations and not _is_code(statement.declarations):
                return False
            continue
        if isinstance(statement, DeclarationNode) and is_property_name(statement.property):
            continue
        return False
    return True


def looks_like_code(text: str) -> bool:
    """
    Check whether comment content is a complete declaration or rule

    The content is parsed as block content, so a lone declaration with no
    trailing `;` still counts.

    Args:
        text: Comment content without delimiters

    Returns:
        True if the content parses as stylesheet code
    """
    if not text.strip():
        return False
    try:
        sheet = parse_stylesheet(text, fragment=True)
    except ParseError:
        return False
    return _is_code(sheet.children)


class CommentedOutCodeRule(LintRule):
    """Flags comments whose content is stylesheet code"""

    definition = StyleRule(
        rule_id='commented-out-code-block',
        message="Comment contains disabled code, delete it instead of commenting it out",
        severity='warning',
        node_kind='comment',
        description='Disallows commented-out declarations and rules',
    )

    def check(self, node: CommentNode, context: RuleContext) -> Iterable[Violation]:
        if looks_like_code(node.text):
            return [self.violation(context, node.line, node.column)]
        return []
