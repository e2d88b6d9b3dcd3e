from setuptools import setup, find_namespace_packages

setup(
    name='sceneforge',
    version='0.1.0',
    author='nassimberrada',
    author_email='your.email@example.com',
    description='A compiler for templated scene description files: template expansion, parsing, resolution and world-space scene graphs.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    url='https://github.com/yourusername/sceneforge',
    packages=find_namespace_packages(include=['sceneforge', 'sceneforge.*']),
    include_package_data=True,
    install_requires=[
        'numpy',
        'watchdog',
    ],
    extras_require={
        'test': [
            'pytest',
        ]
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics :: 3D Rendering',
        'Topic :: Software Development :: Compilers',
    ],
    python_requires='>=3.7',
)
