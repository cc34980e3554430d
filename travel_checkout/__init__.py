"""
Service de checkout d'une plateforme de réservation de voyages.
Réconcilie le montant payable d'une réservation, crée l'intention de paiement
et confirme le paiement au retour du prestataire.
"""
