import os
import sys
sys.path.insert(0, os.path.abspath('..'))

from trajectory_design import __version__

project = 'Transfer Trajectory Design'
copyright = '2026, Transfer Trajectory Design contributors'
author = 'Transfer Trajectory Design contributors'
release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.mathjax',
]

autodoc_member_order = 'bysource'

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
