"""
Module 'checkout': tunnel de commande (machine à états, validation, erreurs, notifications).
Importer les sous-modules directement (ex: storefront.checkout.machine).
"""
