from setuptools import setup, find_packages
import re

# Read version from nwfpay/__init__.py
with open('nwfpay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='nwf-pay',
    version=version,
    packages=find_packages(include=['nwfpay', 'nwfpay.*']),
    package_data={
        'nwfpay.sdk.rendering': ['templates/*.html'],
    },
    install_requires=[
        'PyPDF2>=3.0.0',
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
        'reportlab>=4.0',
        'Jinja2>=3.1',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'nwf-pay=nwfpay.cli.__main__:main',
            'nwf-pay-mcp=nwfpay.mcp.server:run_server',
        ],
    },
    author='NWF Payroll Services',
    description='Hourly payroll runs with certified paystub documents.',
    python_requires='>=3.10',
)
