import re
from ast import literal_eval
from codecs import open

from setuptools import setup

_version_re = re.compile(r'__version__\s+=\s+(.*)')

with open('pelicanctl/__version__.py', 'rb') as f:
    version = str(literal_eval(_version_re.search(
        f.read().decode('utf-8')).group(1)))

with open('README.rst', 'r', 'utf-8') as f:
    readme = f.read()
with open('HISTORY.rst', 'r', 'utf-8') as f:
    history = f.read()

setup(
    name='pelicanctl',
    version=version,
    license='AGPL 3',
    author='pelicanctl contributors',
    description='A command line interface to the Pelican game server panel.',
    long_description=readme + '\n\n' + history,
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.9',
    packages=[
        'pelicanctl',
        'pelicanctl.bulk',
        'pelicanctl.cli',
    ],
    entry_points={
        'console_scripts': [
            'pelicanctl = pelicanctl.cli.pc:main',
        ],
    },
    install_requires=[
        'requests>=2.25.0,<3.0.0',
        'urllib3>=1.26.0',
        'keyring>=23.0.0',
        'tqdm>=4.0.0',
        'rich>=12.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'responses>=0.20.0',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'Natural Language :: English',
        'License :: OSI Approved :: GNU Affero General Public License v3',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ]
)
