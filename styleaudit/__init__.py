"""Style-rule linter for CSS/SCSS stylesheets"""

__version__ = '0.1.0'
