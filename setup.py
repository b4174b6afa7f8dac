from setuptools import setup, find_packages

setup(name='larsen',
      version='0.1',
      description='LARS, LASSO and Elastic Net paths with incremental '
                  'Cholesky updates',
      license='BSD',
      packages=find_packages(exclude=['tests', 'tests.*']),
      python_requires='>=3.8',
      install_requires=[
          'numpy',
          'scipy',
          'scikit-learn>=1.0',
      ],
      extras_require={
          'dev': ['pytest', 'flake8'],
      },
      include_package_data=True,
      zip_safe=False)
