from setuptools import setup

setup(
    name='blueprintmodel',
    version='0',
    packages=['blueprintmodel'],
    python_requires='>=3.8',
    extras_require={
        'test': ['pytest']
    },
    license='',
    author='blueprintmodel developers',
    author_email='',
    description='Object blueprints with single-parent inheritance and delegated behavior resolution.'
)
